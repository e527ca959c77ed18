"""Well-known credential file locations."""

from __future__ import annotations

import logging
import os
import sys
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

CREDENTIALS_ENV_VAR = "GOOGLE_APPLICATION_CREDENTIALS"
ADC_FILE_NAME = "application_default_credentials.json"


def default_gcloud_creds_path(
    environ: Optional[Mapping[str, str]] = None,
    *,
    platform: Optional[str] = None,
) -> str:
    """
    Return the location of the application default credentials file.

    Resolution:
        1. GOOGLE_APPLICATION_CREDENTIALS, if it names an existing file.
           A value pointing at a missing file is ignored with a warning.
        2. %APPDATA%/gcloud/application_default_credentials.json on Windows.
        3. ~/.config/gcloud/application_default_credentials.json elsewhere.
    """
    env = os.environ if environ is None else environ
    plat = sys.platform if platform is None else platform

    override = env.get(CREDENTIALS_ENV_VAR, "")
    if override:
        if os.path.isfile(override):
            return override
        logger.warning(
            "%s points to a non-existent file; ignoring the value: %s",
            CREDENTIALS_ENV_VAR,
            override,
        )

    if plat.startswith("win"):
        root_dir = env.get("APPDATA", "")
    else:
        root_dir = os.path.join(env.get("HOME", os.path.expanduser("~")), ".config")

    return os.path.join(root_dir, "gcloud", ADC_FILE_NAME)
