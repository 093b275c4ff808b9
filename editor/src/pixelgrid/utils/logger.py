"""Global logging and error handling utilities"""
import sys
import logging
import traceback

# Detect debug mode - True if running from source, False if packaged
DEBUG_MODE = not getattr(sys, 'frozen', False)

_logger = logging.getLogger('Errors')
_error_reporter = None


def set_error_reporter(callback):
    """Set the callback that shows user-facing error messages

    Args:
        callback: Function receiving (title, message), or None to unset
    """
    global _error_reporter
    _error_reporter = callback


def loggerRaise(e: Exception, user_message: str = None, title: str = "Error"):
    """Log an exception, report it to the user, then re-raise it

    Args:
        e: The exception to handle
        user_message: User-friendly message for the reporter (optional)
        title: Title for the report

    In DEBUG_MODE:
        - The traceback is logged at error level

    In RELEASE_MODE:
        - Only the message is logged, the traceback goes to debug level

    Either way the registered error reporter receives the message and the
    exception is raised again.
    """
    message = user_message if user_message else str(e)
    tb = ''.join(traceback.format_exception(type(e), e, e.__traceback__))

    if DEBUG_MODE:
        _logger.error(f"{title}: {message}\n{tb}")
    else:
        _logger.error(f"{title}: {message}")
        _logger.debug(tb)

    if _error_reporter:
        try:
            _error_reporter(title, message)
        except Exception as report_error:
            _logger.error(f"Error reporter failed: {report_error}")
    else:
        # Fallback if no reporter set
        print(f"ERROR (no reporter): {title} - {message}", file=sys.stderr)

    # Re-raise so application can handle it appropriately
    raise e
