import unittest

from gcredmgr.models import AccessToken, CredentialBundle


class TestModels(unittest.TestCase):
    def test_access_token_empty(self) -> None:
        self.assertTrue(AccessToken().is_empty)
        self.assertTrue(AccessToken(token="").is_empty)
        self.assertFalse(AccessToken(token="t", ttl_seconds=10).is_empty)

    def test_credential_bundle_to_dict(self) -> None:
        bundle = CredentialBundle(api_key="K")
        self.assertEqual(
            bundle.to_dict(),
            {"api_key": "K", "json_refresh_token": None, "access_token": None},
        )


if __name__ == "__main__":
    unittest.main()
