import io
import os

import pytest

from drivegate.sdk.exceptions import LocalFileNotFoundError, ValidationError
from drivegate.sdk.local import LocalStore


@pytest.fixture
def store(stage):
    return LocalStore(stage)


class TestLocalStore:

    def test_resolve_prefers_upload_dir(self, stage, store):
        for directory in (stage.upload_dir, stage.image_dir):
            with open(os.path.join(directory, "dup.txt"), "w") as f:
                f.write(directory)

        assert store.resolve("dup.txt") == os.path.join(stage.upload_dir, "dup.txt")

    def test_resolve_missing_raises_not_found(self, store):
        with pytest.raises(LocalFileNotFoundError):
            store.resolve("nope.txt")

    @pytest.mark.parametrize("name", ["../secret", "a/b.txt", "..", "a\\b.txt"])
    def test_resolve_rejects_path_components(self, store, name):
        with pytest.raises(ValidationError):
            store.resolve(name)

    def test_replace_moves_staged_file_over_original(self, stage, store):
        original = stage.stage(io.BytesIO(b"old"), "doc.txt")
        replacement = stage.stage(io.BytesIO(b"new"), "doc.txt")

        target = store.replace(original.filename, replacement)

        assert target == original.path
        assert not replacement.exists()
        with open(target, "rb") as f:
            assert f.read() == b"new"

    def test_replace_missing_discards_staged_file(self, stage, store):
        replacement = stage.stage(io.BytesIO(b"new"), "doc.txt")

        with pytest.raises(LocalFileNotFoundError):
            store.replace("missing.txt", replacement)

        assert not replacement.exists()

    def test_delete(self, stage, store):
        staged = stage.stage(io.BytesIO(b"x"), "x.txt")

        store.delete(staged.filename)

        assert not staged.exists()

    def test_delete_missing_raises_not_found(self, store):
        with pytest.raises(LocalFileNotFoundError):
            store.delete("x.txt")
