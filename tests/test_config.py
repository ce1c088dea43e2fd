import json

from netspark_sales.config import DEFAULT_ROLE_LISTS_PATH, Config, load_role_lists


def test_load_role_lists(tmp_path):
    path = tmp_path / "roles.json"
    path.write_text(json.dumps({'executive': [' Boss@X.com '], 'manager': ['lead@x.com']}))

    assert load_role_lists(path) == {'executive': ['boss@x.com'], 'manager': ['lead@x.com']}


def test_load_role_lists_missing_or_broken(tmp_path):
    assert load_role_lists(tmp_path / "missing.json") == {'executive': [], 'manager': []}

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert load_role_lists(broken) == {'executive': [], 'manager': []}


def test_bundled_role_lists():
    roles = load_role_lists(DEFAULT_ROLE_LISTS_PATH)
    assert len(roles['executive']) == 5
    assert 'jesse.doyle@netsparktelecom.com' in roles['manager']


def test_email_list_parsing():
    assert Config._as_email_list("A@x.com, b@x.com,,") == ['a@x.com', 'b@x.com']
    assert Config._as_email_list(['A@x.com', ' ']) == ['a@x.com']
    assert Config._as_email_list(None) == []
