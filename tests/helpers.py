"""Result assertions shared by the tests."""

from typing import Any

from kungfu import Error, Ok, Result

from storefront import ShopError


def expect_ok[T](result: Result[T, Any]) -> T:
    match result:
        case Ok(value):
            return value
        case Error(e):
            raise AssertionError(f"expected Ok, got Error({e!r})")


def expect_error(result: Result[Any, ShopError], code: str | None = None) -> ShopError:
    match result:
        case Ok(value):
            raise AssertionError(f"expected Error, got Ok({value!r})")
        case Error(e):
            if code is not None:
                assert e.code == code, f"expected {code}, got {e.code}"
            return e


def is_ok(result: Result[Any, Any]) -> bool:
    match result:
        case Ok(_):
            return True
        case _:
            return False
