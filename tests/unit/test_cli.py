"""
Tests for resume_rag.cli — commands that need no AI provider.
"""

import json

import pytest
from typer.testing import CliRunner

from resume_rag.cli import app

runner = CliRunner()


@pytest.fixture
def corpus_file(tmp_path, corpus, make_job):
    path = tmp_path / "corpus.json"
    path.write_text(
        json.dumps({
            "resumes": [r.model_dump(mode="json") for r in corpus.values()],
            "jobs": [make_job().model_dump(mode="json")],
        }),
        encoding="utf-8",
    )
    return path


class TestCli:
    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.stdout

    def test_analytics(self, corpus_file):
        result = runner.invoke(app, ["analytics", "--corpus", str(corpus_file)])
        assert result.exit_code == 0
        assert "Processed resumes: 3" in result.stdout

    def test_analytics_with_utc_offsets(self, tmp_path, corpus):
        resumes = [r.model_dump(mode="json") for r in corpus.values()]
        resumes[0]["created_at"] = "2024-01-01T00:00:00Z"
        resumes[1]["created_at"] = "2024-01-02T09:30:00+05:30"
        path = tmp_path / "offsets.json"
        path.write_text(json.dumps({"resumes": resumes, "jobs": []}), encoding="utf-8")

        result = runner.invoke(app, ["analytics", "--corpus", str(path)])
        assert result.exit_code == 0
        assert "Processed resumes: 3" in result.stdout

    def test_suggest(self, corpus_file):
        result = runner.invoke(app, ["suggest", "analyst", "--corpus", str(corpus_file)])
        assert result.exit_code == 0
        assert "Analyst candidates" in result.stdout

    def test_missing_corpus_file(self, tmp_path):
        result = runner.invoke(app, ["suggest", "--corpus", str(tmp_path / "missing.json")])
        assert result.exit_code == 1

    def test_store_required(self):
        result = runner.invoke(app, ["analytics"])
        assert result.exit_code == 1

    def test_malformed_corpus(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        result = runner.invoke(app, ["analytics", "--corpus", str(path)])
        assert result.exit_code == 1
