import json
from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

import run_reminders
from app.core.clock import utcnow


@pytest.fixture
def cli(monkeypatch, db, gateway):
    monkeypatch.setattr(run_reminders, "get_thread_db", lambda: db)
    monkeypatch.setattr(run_reminders, "get_notification_gateway", lambda: gateway)
    return run_reminders


def test_cli_prints_summary(cli, capsys, sms, owner, vet, make_appointment):
    make_appointment(owner, vet, starts_at=utcnow() + timedelta(minutes=30))

    assert cli.main(["hour-ahead"]) == 0

    summary = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
    assert summary["window"] == "hour_ahead"
    assert summary["reminders_sent"] == 1
    assert len(sms.sent) == 2


def test_cli_exits_nonzero_when_store_unavailable(cli, monkeypatch):
    class BrokenScanner:
        def scan(self, now):
            raise OperationalError("SELECT", {}, Exception("database is down"))

    monkeypatch.setattr(cli, "build_scanner", lambda job, db, gateway: BrokenScanner())

    assert cli.main(["vaccinations"]) == 1


def test_cli_rejects_unknown_job(cli):
    with pytest.raises(SystemExit):
        cli.main(["weekly"])
