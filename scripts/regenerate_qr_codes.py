"""Re-issue the QR payload of every student of one organization.

Run after rotating an organization's ``qr_secret`` (or the system
``QR_SECRET``) so that stored payloads match the new key:

    python scripts/regenerate_qr_codes.py <organization_id>
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.event_attendance.event_attendance.container import build_container


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("organization_id", type=int)
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    container = build_container(
        db_config=dict(settings.DB_CONFIG),
        qr_secret=getattr(settings, "QR_SECRET", None),
    )

    count = container.qr_service.regenerate_for_organization(args.organization_id)
    print(f"OK: Regenerated {count} QR codes for organization {args.organization_id}")


if __name__ == "__main__":
    main()
