from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.leave_system.leave_system.database.bootstrap import ensure_demo_data
from src.leave_system.leave_system.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(dict(settings.DB_CONFIG))
    ensure_demo_data(DatabaseConnection.get_instance(config))

    print(f"OK: Seeded database -> {config.user}@{config.host}:{config.port}/{config.database}")


if __name__ == "__main__":
    main()
