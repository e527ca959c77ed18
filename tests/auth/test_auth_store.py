import threading
import time
import unittest

from gcredmgr.auth import ApiKeyTokenSource, AuthMode, AuthStore, TokenSource
from gcredmgr.errors import TokenRefreshError, TransportError, UnauthenticatedError
from gcredmgr.models import AccessToken


class FakeSource(TokenSource):
    kind = "fake"

    def __init__(self, ttl: float = 100.0, token=None, fail_with=None, empty=False) -> None:
        self.ttl = ttl
        self.token = token
        self.fail_with = fail_with
        self.empty = empty
        self.refresh_calls = 0

    def access_token(self) -> AccessToken:
        if self.token is None:
            return AccessToken()
        return AccessToken(token=self.token, ttl_seconds=self.ttl)

    def refresh(self) -> None:
        self.refresh_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if not self.empty:
            self.token = f"tok-{self.refresh_calls}"

    def refresh_token_json(self):
        return '{"refresh_token": "rt"}'


class Clock:
    def __init__(self, now: float = 1_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class TestAuthStore(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = Clock()
        self.store = AuthStore(clock=self.clock)

    def test_empty_store(self) -> None:
        self.assertFalse(self.store.is_authenticated())
        self.assertIs(self.store.mode, AuthMode.UNAUTHENTICATED)
        self.store.ensure_fresh()  # no-op
        with self.assertRaises(UnauthenticatedError):
            self.store.get_bearer_token()
        with self.assertRaises(UnauthenticatedError):
            self.store.get_credential_bundle()

    def test_first_read_refreshes(self) -> None:
        source = FakeSource()
        self.store.install(source)
        self.assertEqual(self.store.get_bearer_token(), "tok-1")
        self.assertEqual(source.refresh_calls, 1)
        self.assertEqual(self.store.snapshot().last_refresh_unix_time, 1_000_000)

    def test_seeded_token_still_refreshes_once_when_never_refreshed(self) -> None:
        source = FakeSource(token="seed")
        self.store.install(source)
        self.store.ensure_fresh()
        self.assertEqual(source.refresh_calls, 1)

    def test_no_refresh_under_eighty_percent_of_ttl(self) -> None:
        source = FakeSource(ttl=100.0)
        self.store.install(source)
        self.store.ensure_fresh()

        self.clock.now += 79
        self.store.ensure_fresh()
        self.store.get_bearer_token()
        self.assertEqual(source.refresh_calls, 1)

    def test_exactly_one_refresh_at_eighty_percent_of_ttl(self) -> None:
        source = FakeSource(ttl=100.0)
        self.store.install(source)
        self.store.ensure_fresh()

        self.clock.now += 80
        self.store.ensure_fresh()
        self.store.ensure_fresh()
        self.assertEqual(source.refresh_calls, 2)
        self.assertEqual(self.store.snapshot().last_refresh_unix_time, 1_000_080)

    def test_failed_refresh_latches_suspension(self) -> None:
        source = FakeSource(ttl=100.0)
        self.store.install(source)
        self.store.ensure_fresh()

        source.fail_with = TransportError("down")
        self.clock.now += 90
        with self.assertRaises(TransportError):
            self.store.ensure_fresh()
        self.assertTrue(self.store.snapshot().refresh_suspended)

        # Further checks are no-ops and the stale token is still served.
        self.clock.now += 1000
        self.store.ensure_fresh()
        self.assertEqual(self.store.get_bearer_token(), "tok-1")
        self.assertEqual(source.refresh_calls, 2)

    def test_refresh_yielding_no_token_latches_suspension(self) -> None:
        source = FakeSource(empty=True)
        self.store.install(source)
        with self.assertRaises(TokenRefreshError):
            self.store.ensure_fresh()
        self.assertTrue(self.store.snapshot().refresh_suspended)
        self.assertIsNone(self.store.snapshot().last_refresh_unix_time)
        self.store.ensure_fresh()
        self.assertEqual(source.refresh_calls, 1)

    def test_api_key_mode(self) -> None:
        self.store.install(ApiKeyTokenSource("XYZ"))
        self.assertTrue(self.store.is_authenticated())
        self.assertIs(self.store.mode, AuthMode.API_KEY)
        self.assertIsNone(self.store.get_bearer_token())
        bundle = self.store.get_credential_bundle()
        self.assertEqual(bundle.api_key, "XYZ")
        self.assertIsNone(bundle.access_token)
        state = self.store.snapshot()
        self.assertIsNone(state.active_source)

    def test_token_bundle(self) -> None:
        self.store.install(FakeSource())
        bundle = self.store.get_credential_bundle()
        self.assertIsNone(bundle.api_key)
        self.assertEqual(bundle.access_token, "tok-1")
        self.assertEqual(bundle.json_refresh_token, '{"refresh_token": "rt"}')

    def test_clear_resets_everything(self) -> None:
        self.store.install(FakeSource())
        self.store.ensure_fresh()
        self.store.clear()
        state = self.store.snapshot()
        self.assertIs(state.mode, AuthMode.UNAUTHENTICATED)
        self.assertIsNone(state.active_source)
        self.assertIsNone(state.api_key)
        self.assertIsNone(state.last_refresh_unix_time)
        self.assertFalse(state.refresh_suspended)

    def test_concurrent_readers_refresh_once(self) -> None:
        class SlowSource(FakeSource):
            def refresh(self) -> None:
                time.sleep(0.05)
                super().refresh()

        source = SlowSource()
        self.store.install(source)
        threads = [threading.Thread(target=self.store.ensure_fresh) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        self.assertEqual(source.refresh_calls, 1)


if __name__ == "__main__":
    unittest.main()
