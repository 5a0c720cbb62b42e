"""Tests for the load procedure, driven through a mock backend."""

import pytest

from fibenload.core.models import ErrorKind, LoadAction, Result
from fibenload.loader.runner import resolve_pending_integrity, run, run_integrity


def assert_no_generated_files(config):
    assert not config.alias_config_path.exists()
    assert not config.scratch_path.exists()


class TestImportRun:
    """Default IMPORT runs."""

    def test_steps_run_in_order(self, make_config, mock_backend):
        config = make_config()

        result = run(config, backend=mock_backend)

        assert result.success, result.error
        assert mock_backend.ops() == [
            "connect",
            "create_schema",
            "set_schema",
            "run_script",
            "import_csv",
            "import_csv",
            "import_csv",
            "terminate",
        ]

    def test_tables_loaded_in_list_order_into_schema(self, make_config, mock_backend, fiben_dir):
        config = make_config()

        run(config, backend=mock_backend)

        imports = [c for c in mock_backend.calls if c[0] == "import_csv"]
        assert [c[2] for c in imports] == ["BENCH.ACCOUNT", "BENCH.CUSTOMER", "BENCH.SECURITY"]
        assert imports[0][1] == fiben_dir / "data" / "ACCOUNT.csv"

    def test_import_commits_every_100000_rows(self, make_config, mock_backend):
        config = make_config()

        run(config, backend=mock_backend)

        imports = [c for c in mock_backend.calls if c[0] == "import_csv"]
        assert imports
        assert all(c[3] == 100_000 for c in imports)

    def test_local_connection_uses_database_name(self, make_config, mock_backend):
        config = make_config()

        run(config, backend=mock_backend)

        assert mock_backend.calls[0] == ("connect", "FIBEN", None, None)
        assert "write_alias" not in mock_backend.ops()

    def test_remote_connection_uses_alias(self, make_config, mock_backend):
        config = make_config(host="db.example.com", port=50000, user="alice", password="pw")

        result = run(config, backend=mock_backend)

        assert result.success
        assert mock_backend.calls[0] == ("write_alias", "FIBENSCR", "db.example.com", 50000)
        assert mock_backend.calls[1] == ("connect", "FIBENSCR", "alice", "pw")

    def test_summary(self, make_config, mock_backend):
        result = run(make_config(), backend=mock_backend)

        summary = result.unwrap()
        assert summary.schema == "BENCH"
        assert summary.action == LoadAction.IMPORT
        assert summary.tables_loaded == 3
        assert summary.total_rows == 6
        assert summary.integrity_checked == []
        assert summary.schema_existed is False

    def test_no_integrity_check_in_import_mode(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(pending=["BENCH.ACCOUNT"])

        run(make_config(), backend=backend)

        assert "pending_integrity_tables" not in backend.ops()
        assert "set_integrity" not in backend.ops()


class TestSchemaCreation:
    """Schema creation tolerates only an existing schema."""

    def test_existing_schema_does_not_abort(self, make_config, mock_backend_cls, duplicate_schema):
        backend = mock_backend_cls(fail_on={"create_schema": duplicate_schema})

        result = run(make_config(), backend=backend)

        assert result.success, result.error
        assert result.unwrap().schema_existed is True
        assert backend.ops().count("import_csv") == 3

    def test_other_schema_error_aborts(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(
            fail_on={"create_schema": Result.fail("SQL0552N no authority", kind=ErrorKind.PRIVILEGE)}
        )

        result = run(make_config(), backend=backend)

        assert not result.success
        assert "create schema" in result.error
        assert "run_script" not in backend.ops()
        assert backend.terminated

    def test_set_schema_failure_aborts(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(fail_on={"set_schema": Result.fail("bad schema")})

        result = run(make_config(), backend=backend)

        assert not result.success
        assert "run_script" not in backend.ops()


class TestFailFast:
    """Any operational failure stops the run."""

    def test_missing_csv_fails_before_connecting(self, make_config, mock_backend, fiben_dir):
        (fiben_dir / "data" / "CUSTOMER.csv").unlink()

        result = run(make_config(), backend=mock_backend)

        assert not result.success
        assert result.kind == ErrorKind.NOT_FOUND
        assert "CUSTOMER.csv" in result.error
        assert mock_backend.calls == []

    def test_missing_data_dir_fails_before_connecting(self, make_config, mock_backend, fiben_dir):
        for csv in (fiben_dir / "data").iterdir():
            csv.unlink()
        (fiben_dir / "data").rmdir()

        result = run(make_config(), backend=mock_backend)

        assert not result.success
        assert "Data directory does not exist" in result.error
        assert mock_backend.calls == []

    def test_connection_failure(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(fail_on={"connect": Result.fail("SQL30081N")})

        result = run(make_config(), backend=backend)

        assert not result.success
        assert result.kind == ErrorKind.CONNECTION
        assert "Could not connect" in result.error
        assert backend.ops() == ["connect"]

    def test_ddl_failure_aborts_before_loads(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(fail_on={"run_script": Result.fail("SQL0104N syntax")})

        result = run(make_config(), backend=backend)

        assert not result.success
        assert "Could not create tables" in result.error
        assert "import_csv" not in backend.ops()
        assert backend.terminated

    def test_table_failure_stops_remaining_tables(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(fail_table="CUSTOMER")

        result = run(make_config(), backend=backend)

        assert not result.success
        assert "BENCH.CUSTOMER" in result.error
        tables = [c[2] for c in backend.calls if c[0] == "import_csv"]
        assert tables == ["BENCH.ACCOUNT", "BENCH.CUSTOMER"]
        assert backend.terminated


class TestLoadRun:
    """LOAD runs and set integrity handling."""

    def test_load_mode_uses_load(self, make_config, mock_backend):
        result = run(make_config(LoadAction.LOAD), backend=mock_backend)

        assert result.success
        assert mock_backend.ops().count("load_csv") == 3
        assert "import_csv" not in mock_backend.ops()

    def test_pending_tables_checked_in_one_statement(self, make_config, mock_backend_cls):
        pending = ["BENCH.ACCOUNT", "BENCH.SECURITY"]
        backend = mock_backend_cls(pending=pending)

        result = run(make_config(LoadAction.LOAD), backend=backend)

        assert result.success, result.error
        integrity_calls = [c for c in backend.calls if c[0] == "set_integrity"]
        assert integrity_calls == [("set_integrity", pending)]
        assert result.unwrap().integrity_checked == pending

    def test_no_pending_tables_skips_set_integrity(self, make_config, mock_backend):
        result = run(make_config(LoadAction.LOAD), backend=mock_backend)

        assert result.success
        assert "pending_integrity_tables" in mock_backend.ops()
        assert "set_integrity" not in mock_backend.ops()

    def test_catalog_query_failure_warns_tables_unusable(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(
            fail_on={"pending_integrity_tables": Result.fail("SQL0204N SYSCAT.TABLES")}
        )

        result = run(make_config(LoadAction.LOAD), backend=backend)

        assert not result.success
        assert "Loaded tables may not be available" in result.error
        assert "set_integrity" not in backend.ops()

    def test_set_integrity_failure(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(
            pending=["BENCH.ACCOUNT"],
            fail_on={"set_integrity": Result.fail("SQL0530N")},
        )

        result = run(make_config(LoadAction.LOAD), backend=backend)

        assert not result.success
        assert "Error setting integrity" in result.error


class TestCleanup:
    """Generated files never outlive a run."""

    def test_removed_after_success(self, make_config, mock_backend_cls):
        config = make_config(LoadAction.LOAD, host="db.example.com", port=50000)
        backend = mock_backend_cls(pending=["BENCH.ACCOUNT"])

        result = run(config, backend=backend)

        assert result.success
        assert_no_generated_files(config)

    def test_removed_after_failure(self, make_config, mock_backend_cls):
        config = make_config(LoadAction.LOAD, host="db.example.com", port=50000)
        backend = mock_backend_cls(
            pending=["BENCH.ACCOUNT"],
            fail_on={"set_integrity": Result.fail("SQL0530N")},
        )

        result = run(config, backend=backend)

        assert not result.success
        assert_no_generated_files(config)

    def test_removed_after_interrupt(self, make_config, mock_backend_cls):
        config = make_config(host="db.example.com", port=50000)

        class InterruptedBackend(mock_backend_cls):
            def run_script(self, script_path):
                raise KeyboardInterrupt

        backend = InterruptedBackend()

        with pytest.raises(KeyboardInterrupt):
            run(config, backend=backend)

        assert backend.terminated
        assert_no_generated_files(config)

    def test_stale_files_removed(self, make_config, mock_backend, fiben_dir):
        config = make_config()
        config.scratch_path.write_text("BENCH.OLD\n")

        run(config, backend=mock_backend)

        assert_no_generated_files(config)


class TestIntegrityOnly:
    """run_integrity and resolve_pending_integrity."""

    def test_run_integrity_connects_and_checks(self, make_config, mock_backend_cls):
        backend = mock_backend_cls(pending=["BENCH.CUSTOMER"])
        config = make_config(LoadAction.LOAD)

        result = run_integrity(config, backend=backend)

        assert result.success
        assert result.value == ["BENCH.CUSTOMER"]
        assert backend.ops() == ["connect", "pending_integrity_tables", "set_integrity", "terminate"]
        assert_no_generated_files(config)

    def test_resolve_uses_target_schema(self, make_config, mock_backend):
        config = make_config(LoadAction.LOAD, schema="other")

        resolve_pending_integrity(config, mock_backend)

        assert mock_backend.calls[0] == ("pending_integrity_tables", "OTHER")
