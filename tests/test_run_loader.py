"""Tests for the batch runner's exit statuses."""

import sys

import pytest

from csvloader import (
    CoercionError,
    DatabaseConnectionError,
    DatabaseError,
    FieldCountError,
    ParseError,
    SchemaError,
    SourceError,
    create_service,
)
from scripts.run_loader import exit_code_for, main

EMPLOYEE_DDL = "CREATE TABLE employee (id INTEGER PRIMARY KEY, name VARCHAR(100) NOT NULL)"


class TestExitCodeFor:
    @pytest.mark.parametrize(
        "error, code",
        [
            (SourceError("CSV file not found: x.csv"), 2),
            (FieldCountError(expected=6, actual=5, line_number=3), 2),
            (DatabaseError("Insert into employee failed"), 3),
            (DatabaseConnectionError("Cannot connect"), 3),
            (SchemaError("Table not found: ghost"), 3),
            (CoercionError("Invalid number format for column type integer: x"), 4),
            (ParseError("Invalid date format: x"), 4),
        ],
    )
    def test_mapping(self, error, code):
        assert exit_code_for(error) == code


@pytest.fixture
def loader_dir(tmp_path):
    db_path = tmp_path / "loader.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    try:
        service.execute_ddl(EMPLOYEE_DDL)
    finally:
        service.close()
    (tmp_path / "loader.properties").write_text(
        f"db.url=sqlite:///{db_path}\ncsv.dir={tmp_path}\n", encoding="utf-8"
    )
    return tmp_path


def run(monkeypatch, *argv):
    monkeypatch.delenv("CSVLOADER_DB_URL", raising=False)
    monkeypatch.setattr(sys, "argv", ["run_loader", *argv])
    main()


class TestMain:
    def test_success_returns_normally(self, monkeypatch, loader_dir):
        (loader_dir / "employee.csv").write_text(
            "id,name\n1,Ann\n", encoding="utf-8"
        )
        run(monkeypatch, "--config", str(loader_dir / "loader.properties"), "--files", "employee.csv")

    def test_missing_config(self, monkeypatch, tmp_path):
        with pytest.raises(SystemExit) as excinfo:
            run(monkeypatch, "--config", str(tmp_path / "absent.properties"))
        assert excinfo.value.code == 1

    def test_missing_file_is_io_failure(self, monkeypatch, loader_dir):
        with pytest.raises(SystemExit) as excinfo:
            run(monkeypatch, "--config", str(loader_dir / "loader.properties"), "--files", "employee.csv")
        assert excinfo.value.code == 2

    def test_unknown_table_is_database_failure(self, monkeypatch, loader_dir):
        (loader_dir / "ghost.csv").write_text("id\n1\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            run(monkeypatch, "--config", str(loader_dir / "loader.properties"), "--files", "ghost.csv")
        assert excinfo.value.code == 3

    def test_bad_value_is_other_failure(self, monkeypatch, loader_dir):
        (loader_dir / "employee.csv").write_text("id,name\nabc,Ann\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            run(monkeypatch, "--config", str(loader_dir / "loader.properties"), "--files", "employee.csv")
        assert excinfo.value.code == 4

    def test_first_failure_decides_status(self, monkeypatch, loader_dir):
        (loader_dir / "employee.csv").write_text("id,name\nabc,Ann\n", encoding="utf-8")
        with pytest.raises(SystemExit) as excinfo:
            run(
                monkeypatch,
                "--config",
                str(loader_dir / "loader.properties"),
                "--files",
                "missing.csv",
                "employee.csv",
                "--continue-on-error",
            )
        assert excinfo.value.code == 2
