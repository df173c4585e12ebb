"""Tests for the command-line interface."""

import json

import pytest
from typer.testing import CliRunner

from certcheck import cli
from certcheck.cli import app
from certcheck.storage.db import CertCheckDB

runner = CliRunner()


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("CERTCHECK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("CERTCHECK_USER", "alice")
    # Wide enough that table cells are not wrapped
    monkeypatch.setattr(cli.console, "width", 200)
    return tmp_path / "data"


def open_db(data_dir):
    return CertCheckDB(data_dir / "certcheck.db")


def invoke(*args):
    return runner.invoke(app, list(args))


class TestInfoCommands:
    def test_version(self):
        result = invoke("version")
        assert result.exit_code == 0
        assert "certcheck version" in result.stdout

    def test_fields(self, data_dir):
        result = invoke("fields", "--category", "general")
        assert result.exit_code == 0
        assert "named_insured" in result.stdout
        assert "gl_policy_number" not in result.stdout

    def test_operators(self, data_dir):
        result = invoke("operators")
        assert result.exit_code == 0
        assert "not_contains" in result.stdout


class TestRulesetCommands:
    def test_create_and_list(self, data_dir):
        result = invoke("ruleset", "create", "Minimums", "-d", "Carrier limits")
        assert result.exit_code == 0
        assert "Created requirement set" in result.stdout

        with open_db(data_dir) as db:
            rule_sets = db.list_rule_sets("alice")
        assert [rs.name for rs in rule_sets] == ["Minimums"]
        assert rule_sets[0].description == "Carrier limits"

        result = invoke("ruleset", "list")
        assert result.exit_code == 0
        assert "Minimums" in result.stdout

    def test_add_and_remove_rule(self, data_dir):
        invoke("ruleset", "create", "Minimums")

        result = invoke(
            "ruleset", "add-rule", "Minimums",
            "gl_coverage_limits", "greater_than_or_equal", "1000000",
        )
        assert result.exit_code == 0
        assert "gl_coverage_limits >= 1000000" in result.stdout

        result = invoke("ruleset", "add-rule", "Minimums", "form_type", "contains", "CSIO", "--logic", "or")
        assert result.exit_code == 0

        with open_db(data_dir) as db:
            rules = db.find_rule_set("alice", "Minimums").rules
        assert [r.field_key for r in rules] == ["gl_coverage_limits", "form_type"]
        assert rules[1].logical_operator.value == "or"

        result = invoke("ruleset", "remove-rule", "Minimums", "1")
        assert result.exit_code == 0

        with open_db(data_dir) as db:
            rules = db.find_rule_set("alice", "Minimums").rules
        assert [r.field_key for r in rules] == ["form_type"]

    def test_add_rule_unknown_field(self, data_dir):
        invoke("ruleset", "create", "Minimums")

        result = invoke("ruleset", "add-rule", "Minimums", "gl_limits", "equal_to", "1")

        assert result.exit_code == 1
        assert "Unknown certificate field" in result.stdout

    def test_add_rule_invalid_operator(self, data_dir):
        invoke("ruleset", "create", "Minimums")
        result = invoke("ruleset", "add-rule", "Minimums", "form_type", "matches", "CSIO")
        assert result.exit_code != 0

    def test_remove_rule_out_of_range(self, data_dir):
        invoke("ruleset", "create", "Minimums")
        result = invoke("ruleset", "remove-rule", "Minimums", "3")
        assert result.exit_code == 1

    def test_remove_rule_from_empty_set(self, data_dir):
        invoke("ruleset", "create", "Minimums")
        result = invoke("ruleset", "remove-rule", "Minimums", "1")
        assert result.exit_code == 1
        assert "has no rules" in result.stdout

    def test_show_missing(self, data_dir):
        result = invoke("ruleset", "show", "Nothing")
        assert result.exit_code == 1
        assert "not found" in result.stdout

    def test_delete(self, data_dir):
        invoke("ruleset", "create", "Minimums")

        result = invoke("ruleset", "delete", "Minimums")
        assert result.exit_code == 0

        with open_db(data_dir) as db:
            assert db.list_rule_sets("alice") == []
            actions = [e.action_type for e in db.list_audit_events("alice")]
        assert actions == ["delete", "create"]

    def test_user_option_scopes_data(self, data_dir):
        invoke("--user", "bob", "ruleset", "create", "Bob's set")

        with open_db(data_dir) as db:
            assert db.list_rule_sets("alice") == []
            assert len(db.list_rule_sets("bob")) == 1


class TestDocumentCommands:
    @pytest.fixture
    def sample_pdf(self, tmp_path):
        path = tmp_path / "Example2.pdf"
        path.write_bytes(b"%PDF-1.4")
        return path

    def test_extract_sample(self, data_dir, sample_pdf):
        result = invoke("extract", str(sample_pdf), "--mock-llm")
        assert result.exit_code == 0
        assert "Stored as document" in result.stdout

        with open_db(data_dir) as db:
            stored = db.list_documents("alice")
        assert len(stored) == 1
        assert stored[0].record.general_liability.policy_number == "654321"

    def test_extract_missing_file(self, data_dir, tmp_path):
        result = invoke("extract", str(tmp_path / "missing.pdf"))
        assert result.exit_code == 1

    def test_validate_with_report(self, data_dir, sample_pdf, tmp_path):
        invoke("extract", str(sample_pdf), "--mock-llm")
        invoke("ruleset", "create", "Minimums")
        invoke("ruleset", "add-rule", "Minimums", "gl_coverage_limits", "greater_than_or_equal", "1000000")
        invoke("ruleset", "add-rule", "Minimums", "gl_deductible_currency", "equal_to", "USD")

        with open_db(data_dir) as db:
            document_id = db.list_documents("alice")[0].id

        output = tmp_path / "report.json"
        result = invoke("validate", document_id, "Minimums", "--output", str(output))

        assert result.exit_code == 0
        assert "1 pass, 1 fail, 0 missing" in result.stdout

        report = json.loads(output.read_text(encoding="utf-8"))
        assert report["document_id"] == document_id
        assert report["results"]["gl_coverage_limits"]["status"] == "pass"
        assert report["results"]["gl_deductible_currency"]["status"] == "fail"

    def test_validate_unknown_document(self, data_dir):
        invoke("ruleset", "create", "Minimums")
        result = invoke("validate", "no-such-doc", "Minimums")
        assert result.exit_code == 1
        assert "Document not found" in result.stdout

    def test_documents_and_audit(self, data_dir, sample_pdf):
        invoke("extract", str(sample_pdf), "--mock-llm")

        result = invoke("document", "list")
        assert result.exit_code == 0
        assert "Example2.pdf" in result.stdout

        result = invoke("audit", "--entity", "document")
        assert result.exit_code == 0
        assert "create" in result.stdout

    @pytest.fixture
    def document_id(self, data_dir, sample_pdf):
        invoke("extract", str(sample_pdf), "--mock-llm")
        with open_db(data_dir) as db:
            return db.list_documents("alice")[0].id

    def test_show(self, data_dir, document_id):
        result = invoke("document", "show", document_id)
        assert result.exit_code == 0
        assert "Intact Insurance Co." in result.stdout

    def test_set_field(self, data_dir, document_id):
        result = invoke("document", "set-field", document_id, "gl_deductible_currency", "USD")
        assert result.exit_code == 0
        assert "GL - Deductible Currency" in result.stdout

        with open_db(data_dir) as db:
            record = db.get_document("alice", document_id).record
            event = db.list_audit_events("alice", limit=1)[0]
        assert record.general_liability.deductible_currency == "USD"
        assert (event.action_type, event.entity_type) == ("update", "document")

    def test_set_field_unknown_key(self, data_dir, document_id):
        result = invoke("document", "set-field", document_id, "gl_currency", "USD")
        assert result.exit_code == 1
        assert "Unknown certificate field" in result.stdout

    def test_delete(self, data_dir, document_id):
        result = invoke("document", "delete", document_id, "--yes")
        assert result.exit_code == 0

        with open_db(data_dir) as db:
            assert db.list_documents("alice") == []
            assert db.list_audit_events("alice", limit=1)[0].action_type == "delete"

    def test_delete_asks_first(self, data_dir, document_id):
        result = runner.invoke(app, ["document", "delete", document_id], input="n\n")
        assert result.exit_code == 1

        with open_db(data_dir) as db:
            assert len(db.list_documents("alice")) == 1

    def test_delete_other_owner(self, data_dir, document_id):
        result = invoke("--user", "bob", "document", "delete", document_id, "--yes")
        assert result.exit_code == 1
        assert "Document not found" in result.stdout


class TestConfigOption:
    def test_overrides_from_file(self, data_dir, tmp_path, monkeypatch):
        monkeypatch.delenv("CERTCHECK_USER")
        config_file = tmp_path / "certcheck.json"
        config_file.write_text(json.dumps({"user_id": "carol"}), encoding="utf-8")

        result = invoke("--config", str(config_file), "ruleset", "create", "Minimums")
        assert result.exit_code == 0

        with open_db(data_dir) as db:
            assert len(db.list_rule_sets("carol")) == 1
            assert db.list_rule_sets("alice") == []

    def test_missing_file(self, data_dir, tmp_path):
        result = invoke("--config", str(tmp_path / "nope.json"), "ruleset", "list")
        assert result.exit_code == 1
        assert "Config file not found" in result.stdout

    def test_invalid_file(self, data_dir, tmp_path):
        config_file = tmp_path / "bad.json"
        config_file.write_text("{not json", encoding="utf-8")

        result = invoke("--config", str(config_file), "ruleset", "list")
        assert result.exit_code == 1
