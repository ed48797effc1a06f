"""Shared test fixtures."""

import pytest

from csvloader import create_service

EMPLOYEE_DDL = """
CREATE TABLE employee (
    id INTEGER PRIMARY KEY,
    name VARCHAR(100) NOT NULL,
    email VARCHAR(100),
    department VARCHAR(50),
    hire_date DATE,
    salary NUMERIC(10, 2)
);
"""

DEPARTMENT_DDL = """
CREATE TABLE department (
    dept_id INTEGER PRIMARY KEY,
    dept_name VARCHAR(100) NOT NULL,
    location VARCHAR(100)
);
"""


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def employee_table(db_service):
    db_service.execute_ddl(EMPLOYEE_DDL)
    return "employee"


@pytest.fixture
def department_table(db_service):
    db_service.execute_ddl(DEPARTMENT_DDL)
    return "department"
