import os
import tempfile
import unittest

from gcredmgr.util.paths import default_gcloud_creds_path


class TestDefaultGcloudCredsPath(unittest.TestCase):
    def test_env_override_pointing_at_existing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "adc.json")
            with open(path, "w", encoding="utf-8") as f:
                f.write("{}")
            env = {"GOOGLE_APPLICATION_CREDENTIALS": path, "HOME": "/home/u"}
            self.assertEqual(default_gcloud_creds_path(env, platform="linux"), path)

    def test_env_override_missing_file_is_ignored_with_warning(self) -> None:
        env = {"GOOGLE_APPLICATION_CREDENTIALS": "/nope/missing.json", "HOME": "/home/u"}
        with self.assertLogs("gcredmgr.util.paths", level="WARNING"):
            path = default_gcloud_creds_path(env, platform="linux")
        self.assertEqual(
            path,
            os.path.join("/home/u", ".config", "gcloud", "application_default_credentials.json"),
        )

    def test_posix_default(self) -> None:
        path = default_gcloud_creds_path({"HOME": "/home/u"}, platform="darwin")
        self.assertTrue(path.endswith(os.path.join("gcloud", "application_default_credentials.json")))
        self.assertTrue(path.startswith(os.path.join("/home/u", ".config")))

    def test_windows_uses_appdata(self) -> None:
        path = default_gcloud_creds_path({"APPDATA": "C:/Users/u/AppData"}, platform="win32")
        self.assertEqual(
            path,
            os.path.join("C:/Users/u/AppData", "gcloud", "application_default_credentials.json"),
        )


if __name__ == "__main__":
    unittest.main()
