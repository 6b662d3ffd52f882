import asyncio
import io

import pytest
from fastapi import UploadFile

from log_sentinel import ingestion, models
from log_sentinel.session import FileIndexError, Session


class TestClassifyKind:
    @pytest.mark.parametrize("name", ["app.json", "deploy.yaml", "pom.xml", ".json", "archive.log.xml"])
    def test_config_suffixes(self, name):
        assert ingestion.classify_kind(name) == "config"

    @pytest.mark.parametrize("name", ["app.log", "trace.txt", "values.yml", "json", "noext", "APP.JSON", "deploy.YAML"])
    def test_everything_else_is_log(self, name):
        assert ingestion.classify_kind(name) == "log"


class TestLoadLogFile:
    def test_decodes_utf8(self):
        f = ingestion.load_log_file("app.log", "café failure\n".encode())
        assert f == models.LogFile(name="app.log", content="café failure\n", kind="log")

    def test_strips_bom(self):
        f = ingestion.load_log_file("settings.json", b"\xef\xbb\xbf{}")
        assert f.content == "{}"
        assert f.kind == "config"

    def test_binary_rejected(self):
        with pytest.raises(ingestion.IngestionError, match="not readable as UTF-8"):
            ingestion.load_log_file("core.dump", b"\xff\xfe\x00\x81")

    def test_missing_name_rejected(self):
        with pytest.raises(ingestion.IngestionError, match="no name"):
            ingestion.load_log_file("", b"data")

    def test_log_file_is_immutable(self):
        f = ingestion.load_log_file("app.log", b"data")
        with pytest.raises(Exception):
            f.content = "changed"


class TestReadUpload:
    def test_reads_single_upload(self):
        upload = UploadFile(file=io.BytesIO(b"ERROR boom"), filename="node.log")
        f = asyncio.run(ingestion.read_upload(upload))
        assert f.name == "node.log"
        assert f.content == "ERROR boom"
        assert f.kind == "log"


class TestSessionFiles:
    def _session_with(self, names):
        session = Session()
        for name in names:
            session.add_file(ingestion.load_log_file(name, b"x"))
        return session

    def test_add_preserves_upload_order(self):
        session = self._session_with(["a.log", "b.json", "c.log"])
        assert [f.name for f in session.files] == ["a.log", "b.json", "c.log"]

    @pytest.mark.parametrize("index", [0, 1, 3])
    def test_remove_by_index(self, index):
        names = ["a.log", "b.json", "c.log", "d.xml"]
        session = self._session_with(names)
        removed = session.remove_file(index)
        assert removed.name == names[index]
        assert [f.name for f in session.files] == names[:index] + names[index + 1:]

    def test_indices_shift_after_removal(self):
        session = self._session_with(["a.log", "b.log", "c.log"])
        session.remove_file(0)
        assert session.remove_file(0).name == "b.log"

    @pytest.mark.parametrize("index", [-1, 2, 10])
    def test_remove_out_of_range(self, index):
        session = self._session_with(["a.log", "b.log"])
        with pytest.raises(FileIndexError):
            session.remove_file(index)
        assert len(session.files) == 2
