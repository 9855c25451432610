"""
Tests for the log_exception decorator used around listener calls.

Tests cover:
- Exception logging and default return values
- Parameter name binding and formatting
- Prefix string formatting with parameter substitution
- Error handling for binding failures and missing parameters
"""

import pytest

from eventext.logger import log_exception


class TestBasicExceptionLogging:
    """Test basic exception logging functionality."""

    def test_function_with_prefix(self, caplog):
        """Test function logs exception with prefix and returns None."""

        @log_exception("Dispatch")
        def func_with_error():
            raise ValueError("Test error")

        result = func_with_error()

        assert result is None
        assert "Dispatch: ValueError: Test error" in caplog.text
        assert "ERROR" in caplog.text
        assert "Traceback" in caplog.text

    def test_function_without_prefix(self, caplog):
        """Test function without prefix still logs exception."""

        @log_exception()
        def func_no_prefix():
            raise RuntimeError("Error without prefix")

        assert func_no_prefix() is None
        assert "RuntimeError: Error without prefix" in caplog.text

    def test_default_return(self, caplog):
        """Test default_return is returned instead of None."""

        @log_exception("Counter", default_return=-1)
        def count():
            raise KeyError("missing")

        assert count() == -1

    def test_successful_execution_no_log(self, caplog):
        """Test successful execution does not log error."""

        @log_exception("SuccessfulOp")
        def func_success():
            return "Success!"

        assert func_success() == "Success!"
        assert "ERROR" not in caplog.text

    def test_base_exception_propagates(self):
        """Test BaseException subclasses are not swallowed."""

        @log_exception("Interrupted")
        def interrupted():
            raise KeyboardInterrupt

        with pytest.raises(KeyboardInterrupt):
            interrupted()


class TestParameterBinding:
    """Test parameter name binding and display."""

    def test_positional_args_with_names(self, caplog):
        """Test positional arguments are bound to parameter names."""

        @log_exception("Listener")
        def run(event: str, payload: int) -> None:
            raise ValueError("Test error")

        run("foo", 3)

        assert "event='foo'" in caplog.text
        assert "payload=3" in caplog.text
        assert "args=" not in caplog.text

    def test_defaults_are_applied(self, caplog):
        """Test default parameter values are shown."""

        @log_exception()
        def run(event: str, retries: int = 2) -> None:
            raise ValueError("Test error")

        run("foo")

        assert "retries=2" in caplog.text

    def test_binding_failure_falls_back(self, caplog):
        """Test arguments that do not bind are still shown raw."""

        @log_exception("Broken")
        def run(event):
            raise ValueError("Test error")

        # The call itself raises TypeError, which is logged like any error
        assert run("foo", "extra") is None
        assert "Failed to bind arguments for function" in caplog.text
        assert "args=('foo', 'extra')" in caplog.text

        @log_exception("Variadic")
        def variadic(*args, **kwargs):
            raise ValueError("Test error")

        variadic(1, key="value")

        assert "args=(1,)" in caplog.text
        assert "kwargs={'key': 'value'}" in caplog.text


class TestPrefixFormatting:
    """Test prefix substitution with bound arguments."""

    def test_prefix_substitution(self, caplog):
        """Test braces in the prefix are filled from the arguments."""

        @log_exception("Listener for event '{event}' failed")
        def run(event, listener):
            raise ValueError("boom")

        run("saved", print)

        assert "Listener for event 'saved' failed: ValueError: boom" in caplog.text

    def test_prefix_missing_parameter(self, caplog):
        """Test an unknown placeholder falls back to the raw prefix."""

        @log_exception("Listener for '{missing}'")
        def run(event):
            raise ValueError("boom")

        run("saved")

        assert "Failed to format prefix" in caplog.text
        assert "Listener for '{missing}': ValueError: boom" in caplog.text
