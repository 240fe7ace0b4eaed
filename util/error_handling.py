import logging
from typing import Any, Callable, List, Tuple, Type, Union

logger = logging.getLogger(__name__)


class ErrorHandling:
    @staticmethod
    def recall(fn: Callable, fix: Union[Callable, List[Callable]]) -> Any:
        """
        Calls a zero-argument function; on failure runs one or more fix strategies
        and retries after each.

        Args:
            fn (Callable[[], Any]): Primary function to run.
            fix (Callable or list of Callable): Fix strategy or list of fallback functions.

        Returns:
            Any: Result of the successful call to `fn`.

        Raises:
            RuntimeError: If all fix attempts fail.
            TypeError: If non-callables are passed.
        """
        if not callable(fn):
            raise TypeError("[recall] First argument must be callable")

        try:
            return fn()
        except Exception as e:
            logger.debug(f"[recall] Primary function failed: {e}")
            last_error = e

        fixes = fix if isinstance(fix, list) else [fix]
        for i, fix_fn in enumerate(fixes):
            if not callable(fix_fn):
                raise TypeError(f"[recall] Fix at index {i} is not callable: {fix_fn}")
            try:
                logger.debug(f"[recall] Attempting fix #{i + 1}: {getattr(fix_fn, '__name__', fix_fn)}")
                fix_fn()
                return fn()
            except Exception as fix_err:
                logger.debug(f"[recall] Fix #{i + 1} failed: {fix_err}")
                last_error = fix_err

        raise RuntimeError(f"[recall] All fix strategies failed: {last_error}") from last_error

    @staticmethod
    def check_types(arg: Any, expected: Union[Type, Tuple[Type, ...], list], label: str = "check_types") -> Any:
        """
        Verifies that the input or each item in a list matches any of the expected type(s).

        Returns:
            The original arg if valid.

        Raises:
            TypeError: If any input does not match the expected types.
        """
        if isinstance(expected, list):
            expected_types = tuple(expected)
        elif isinstance(expected, type):
            expected_types = (expected,)
        elif isinstance(expected, tuple):
            expected_types = expected
        else:
            raise TypeError(f"[{label}] Invalid 'expected' type: {type(expected)}")

        def _validate(x):
            if not isinstance(x, expected_types):
                type_names = ", ".join(t.__name__ for t in expected_types)
                raise TypeError(f"[{label}] Expected type(s): {type_names}; got {type(x).__name__}")

        if isinstance(arg, list):
            for item in arg:
                _validate(item)
        else:
            _validate(arg)

        return arg


recall = ErrorHandling.recall
check_types = ErrorHandling.check_types
