import copy
import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

FIXTURE_FILE = Path(__file__).parent / "test_data.json"


@lru_cache(maxsize=1)
def _fixtures() -> Dict[str, Any]:
    return json.loads(FIXTURE_FILE.read_text())


class FixtureData:
    """Read-only view over test_data.json; `get_copy` for payloads a test mutates"""

    @staticmethod
    def get(key: str) -> Any:
        if key not in _fixtures():
            raise KeyError(f"No fixture named {key!r} in {FIXTURE_FILE.name}")
        return _fixtures()[key]

    @classmethod
    def get_copy(cls, key: str) -> Any:
        return copy.deepcopy(cls.get(key))

    @classmethod
    def credentials(cls, key: str) -> Dict[str, str]:
        account = cls.get(key)
        return {"email": account["email"], "password": account["password"]}
