"""
Tests for the admin JSON backup
"""
from visionsprint.models.project import Vote
from visionsprint.services.backup_service import BACKUP_TABLES, BackupService


def test_export_contains_every_table(db, make_project, user, admin):
    project = make_project(user)
    db.add(Vote(user_id=admin.id, project_id=project.id))
    db.commit()

    backup = BackupService(db).export()

    assert backup["app_version"] == "1.0"
    assert backup["exported_at"].endswith("Z")
    assert set(backup["tables"]) == {name for name, _, _ in BACKUP_TABLES}
    assert backup["tables"]["projects"][0]["id"] == project.id
    assert backup["tables"]["votes"][0]["user_id"] == admin.id
    assert len(backup["tables"]["users"]) == 2


def test_export_leaves_out_credentials(db, user, auth_headers):
    auth_headers(user)

    tables = BackupService(db).export()["tables"]

    assert "sessions" not in tables
    assert "accounts" not in tables


def test_backup_download(client, make_project, user, admin_headers, user_headers):
    make_project(user)

    response = client.get("/api/admin/backup", headers=admin_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("application/json")
    disposition = response.headers["content-disposition"]
    assert disposition.startswith("attachment; filename=visionsprint-backup-")
    assert disposition.endswith(".json")
    assert response.json()["tables"]["projects"][0]["name"] == "Dark Mode Support"

    assert client.get("/api/admin/backup", headers=user_headers).status_code == 403
