import unittest

from gcredmgr.errors.exceptions import (
    ApiError,
    AuthError,
    AuthTimeoutError,
    GCredMgrError,
    HttpErrorInfo,
    InvalidArgumentError,
    TokenRefreshError,
    TransportError,
    UnauthenticatedError,
    UserCancelledError,
    map_http_error,
)


class TestExceptions(unittest.TestCase):
    def test_base_error_keeps_details_and_cause(self) -> None:
        cause = RuntimeError("root")
        err = GCredMgrError("msg", details={"k": "v"}, cause=cause)
        self.assertEqual(str(err), "msg")
        self.assertEqual(err.details["k"], "v")
        self.assertIs(err.cause, cause)

    def test_auth_subclasses(self) -> None:
        for cls in (TokenRefreshError, UnauthenticatedError, UserCancelledError, AuthTimeoutError):
            self.assertTrue(issubclass(cls, AuthError))
        self.assertFalse(issubclass(TransportError, AuthError))

    def test_map_http_error_basic(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=400, message="bad req"))
        self.assertIsInstance(err, InvalidArgumentError)

        err = map_http_error(HttpErrorInfo(status_code=401, message="auth"))
        self.assertIsInstance(err, AuthError)

        err = map_http_error(HttpErrorInfo(status_code=403, reason="forbidden"))
        self.assertIsInstance(err, AuthError)
        self.assertEqual(err.details["reason"], "forbidden")

        err = map_http_error(HttpErrorInfo(status_code=404, message="gone"))
        self.assertIsInstance(err, ApiError)

    def test_map_http_error_retryable_is_transport(self) -> None:
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=429)), TransportError)
        self.assertIsInstance(map_http_error(HttpErrorInfo(status_code=503)), TransportError)

    def test_map_http_error_other_is_api_error(self) -> None:
        err = map_http_error(HttpErrorInfo(status_code=418, details={"url": "u"}))
        self.assertIsInstance(err, ApiError)
        self.assertEqual(str(err), "HTTP error 418")
        self.assertEqual(err.details["url"], "u")


if __name__ == "__main__":
    unittest.main()
