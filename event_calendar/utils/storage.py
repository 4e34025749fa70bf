"""Object storage for uploaded images.

LocalBucket keeps each object as a file under a root directory, with its
content type and custom metadata in a ``.meta.json`` file beside it.
"""
import json
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from werkzeug.security import safe_join

METADATA_SUFFIX = ".meta.json"


@dataclass
class StoredObject:
    key: str
    data: bytes
    content_type: str = "application/octet-stream"
    metadata: Dict[str, str] = field(default_factory=dict)


class LocalBucket:
    def __init__(self, root: str):
        self.root = root

    def _path(self, key: str) -> str:
        path = safe_join(self.root, key)
        if path is None or not key or key.endswith(METADATA_SUFFIX):
            raise ValueError(f"Invalid storage key: {key}")
        return path

    def put(self, key: str, data: bytes, content_type: str, metadata: Optional[Dict[str, str]] = None) -> StoredObject:
        path = self._path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "wb") as f:
            f.write(data)
        with open(path + METADATA_SUFFIX, "w", encoding="utf-8") as f:
            json.dump({"content_type": content_type, "metadata": metadata or {}}, f, ensure_ascii=False)
        return StoredObject(key=key, data=data, content_type=content_type, metadata=metadata or {})

    def get(self, key: str) -> Optional[StoredObject]:
        try:
            path = self._path(key)
        except ValueError:
            return None
        if not os.path.isfile(path):
            return None

        with open(path, "rb") as f:
            data = f.read()
        info = {}
        if os.path.isfile(path + METADATA_SUFFIX):
            with open(path + METADATA_SUFFIX, encoding="utf-8") as f:
                info = json.load(f)
        return StoredObject(
            key=key,
            data=data,
            content_type=info.get("content_type", "application/octet-stream"),
            metadata=info.get("metadata", {}),
        )

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not os.path.isfile(path):
            return False
        os.remove(path)
        if os.path.isfile(path + METADATA_SUFFIX):
            os.remove(path + METADATA_SUFFIX)
        return True

    def list(self, prefix: str = "") -> List[str]:
        keys = []
        if not os.path.isdir(self.root):
            return keys
        for dirpath, _, filenames in os.walk(self.root):
            for filename in filenames:
                if filename.endswith(METADATA_SUFFIX):
                    continue
                key = os.path.relpath(os.path.join(dirpath, filename), self.root).replace(os.sep, "/")
                if key.startswith(prefix):
                    keys.append(key)
        return sorted(keys)
