import threading

import pytest

from tasktrack_app.core.config import REDMINE_API_KEY_HEADER, StatusTransitionRule
from tasktrack_app.core.redmine_client import RedmineAPIError

from conftest import FakeResponse


def _paged_issues(total_count, page_size=100):
    def handler(params):
        offset = int(params["offset"])
        remaining = max(0, total_count - offset)
        count = min(int(params["limit"]), remaining, page_size)
        return {
            "issues": [{"id": offset + i + 1} for i in range(count)],
            "total_count": total_count,
        }

    return handler


def _journal(user_id, created_on, *status_ids):
    return {
        "user": {"id": user_id},
        "created_on": created_on,
        "details": [{"name": "status_id", "old_value": "1", "new_value": s} for s in status_ids],
    }


# ------------------ Request / Cache ------------------


def test_request_sends_api_key_header(make_api):
    api, session = make_api({"projects.json": {"projects": []}})
    api.find_project("Alpha")
    endpoint, params, headers = session.calls[0]
    assert endpoint == "projects.json"
    assert params == {"name": "Alpha"}
    assert headers[REDMINE_API_KEY_HEADER] == "secret-key"


def test_identical_requests_share_one_http_call_within_ttl(make_api):
    api, session = make_api({"projects.json": {"projects": [{"id": 1, "name": "Alpha"}]}})
    now = [0.0]
    api._clock = lambda: now[0]
    first = api._request("projects.json", {"name": "Alpha"})
    now[0] = 299.0
    second = api._request("projects.json", {"name": "Alpha"})
    assert first is second
    assert len(session.calls) == 1

    now[0] = 300.5
    api._request("projects.json", {"name": "Alpha"})
    assert len(session.calls) == 2


def test_expired_entries_are_swept_on_any_request(make_api):
    api, session = make_api(
        {
            "issues/1.json": {"issue": {"id": 1, "journals": []}},
            "issues/2.json": {"issue": {"id": 2, "journals": []}},
            "projects.json": {"projects": []},
        }
    )
    now = [0.0]
    api._clock = lambda: now[0]
    api.get_issue_with_journals(1)
    api.get_issue_with_journals(2)
    assert len(api._cache) == 2

    now[0] = 10_000.0
    api.find_project("X")
    assert len(api._cache) == 1


def test_param_order_does_not_change_cache_key(make_api):
    api, session = make_api({"issues.json": {"issues": []}})
    api._request("issues.json", {"a": 1, "b": 2})
    api._request("issues.json", {"b": 2, "a": 1})
    assert len(session.calls) == 1


def test_concurrent_callers_wait_on_same_request(make_api):
    started = threading.Event()
    release = threading.Event()

    def slow(params):
        started.set()
        release.wait(timeout=5)
        return {"projects": []}

    api, session = make_api({"projects.json": slow})
    results = []
    threads = [
        threading.Thread(target=lambda: results.append(api._request("projects.json", {"name": "X"})))
        for _ in range(3)
    ]
    threads[0].start()
    assert started.wait(timeout=5)
    for t in threads[1:]:
        t.start()
    release.set()
    for t in threads:
        t.join(timeout=5)
    assert len(results) == 3
    assert len(session.calls) == 1


def test_failed_request_is_evicted(make_api):
    responses = [FakeResponse(500, {"errors": ["boom"]}, reason="Internal Server Error"), {"projects": []}]

    def flaky(params):
        return responses.pop(0)

    api, session = make_api({"projects.json": flaky})
    with pytest.raises(RedmineAPIError) as excinfo:
        api._request("projects.json", {"name": "X"})
    assert excinfo.value.status_code == 500
    assert "500" in str(excinfo.value)
    assert "boom" in str(excinfo.value)

    assert api._request("projects.json", {"name": "X"}) == {"projects": []}
    assert len(session.calls) == 2


def test_error_without_json_body(make_api):
    api, _ = make_api({"projects.json": FakeResponse(502, None, reason="Bad Gateway")})
    with pytest.raises(RedmineAPIError) as excinfo:
        api._request("projects.json")
    assert excinfo.value.body == {}
    assert "502 Bad Gateway" in str(excinfo.value)


def test_clear_cache_forces_refetch(make_api):
    api, session = make_api({"issue_statuses.json": {"issue_statuses": [{"id": 1, "name": "New"}]}})
    assert api.get_issue_statuses() == [{"id": 1, "name": "New"}]
    api.clear_cache()
    api.get_issue_statuses()
    assert len(session.calls) == 2


# ------------------ Projects / Users ------------------


def test_find_project_requires_exact_name(make_api):
    api, _ = make_api(
        {
            "projects.json": {
                "projects": [{"id": 1, "name": "Alpha Beta"}, {"id": 2, "name": "alpha"}],
            }
        }
    )
    assert api.find_project("Alpha")["id"] == 2
    assert api.find_project("Alph") is None


def test_find_user_id_prefers_current_account(make_api):
    api, session = make_api({"my/account.json": {"user": {"id": 5, "login": "jdoe"}}})
    assert api.find_user_id_by_username("JDoe") == 5
    assert session.endpoints() == ["my/account.json"]


def test_find_user_id_falls_back_to_recent_issue_authors(make_api):
    api, _ = make_api(
        {
            "my/account.json": {"user": {"id": 5, "login": "jdoe"}},
            "issues.json": {"issues": [{"id": 1, "author": {"id": 9, "name": "Jane Roe"}}]},
        }
    )
    assert api.find_user_id_by_username("jane roe") == 9
    assert api.find_user_id_by_username("nobody") is None


def test_find_user_id_returns_none_on_error(make_api):
    api, _ = make_api({"my/account.json": FakeResponse(401, {"errors": ["Unauthorized"]})})
    assert api.find_user_id_by_username("jdoe") is None


def test_get_current_user(make_api):
    api, _ = make_api({"users/current.json": {"user": {"id": 3, "login": "me"}}})
    assert api.get_current_user() == {"id": 3, "login": "me"}


# ------------------ Issues ------------------


def test_project_issues_capped_at_500(make_api):
    api, session = make_api({"issues.json": _paged_issues(1000)})
    issues = api.get_issues_by_project_id(7)
    assert len(issues) == 500
    assert len(session.calls) == 5
    _, params, _ = session.calls[0]
    assert params["status_id"] == "*"
    assert params["sort"] == "updated_on:desc"
    assert params["project_id"] == "7"


def test_project_issues_stop_at_total_count(make_api):
    api, session = make_api({"issues.json": _paged_issues(150)})
    issues = api.get_issues_by_project_id(7)
    assert [i["id"] for i in issues] == list(range(1, 151))
    assert [call[1]["offset"] for call in session.calls] == ["0", "100"]


def test_project_issues_stop_on_empty_page(make_api):
    api, session = make_api({"issues.json": {"issues": [], "total_count": 40}})
    assert api.get_issues_by_project_id(7) == []
    assert len(session.calls) == 1


def test_journal_hydration_drops_failures_and_empty(make_api):
    api, session = make_api(
        {
            "issues/1.json": {"issue": {"id": 1, "journals": [_journal(5, "2024-01-01T00:00:00Z", "7")]}},
            "issues/2.json": {"issue": {"id": 2, "journals": []}},
            "issues/3.json": FakeResponse(500, {"errors": ["x"]}),
        }
    )
    result = api.get_my_issues_in_project_with_journals(
        [{"id": 1}, {"id": 2}, {"id": 3}], batch_size=2, delay_ms=0
    )
    assert [i["id"] for i in result] == [1]
    assert all(call[1] == {"include": "journals"} for call in session.calls)


def test_journal_hydration_rejects_bad_batch_size(make_api):
    api, _ = make_api({})
    with pytest.raises(ValueError):
        api.get_my_issues_in_project_with_journals([{"id": 1}], batch_size=0)


# ------------------ Journal Filters ------------------


def test_user_interaction_by_author_or_journal(make_api):
    api, _ = make_api({})
    issues = [
        {"id": 1, "author": {"id": 5}, "journals": []},
        {"id": 2, "author": {"id": 8}, "journals": [_journal(5, "2024-01-01T00:00:00Z")]},
        {"id": 3, "author": {"id": 8}, "journals": [_journal(9, "2024-01-01T00:00:00Z")]},
    ]
    assert [i["id"] for i in api.filter_issues_by_user_interaction(issues, 5)] == [1, 2]


def test_code_review_requires_ordered_transition(make_api):
    api, _ = make_api({})
    forward = {
        "id": 1,
        "journals": [
            _journal(5, "2024-01-01T10:00:00Z", "7"),
            _journal(5, "2024-01-02T10:00:00Z", "16"),
        ],
    }
    reversed_ = {
        "id": 2,
        "journals": [
            _journal(5, "2024-01-01T10:00:00Z", "16"),
            _journal(5, "2024-01-02T10:00:00Z", "7"),
        ],
    }
    # listed out of order, but created_on decides
    shuffled = {
        "id": 3,
        "journals": [
            _journal(5, "2024-01-05T10:00:00Z", "16"),
            _journal(5, "2024-01-03T10:00:00Z", "7"),
        ],
    }
    result = api.filter_issues_user_moved_to_code_review([forward, reversed_, shuffled], 5)
    assert [i["id"] for i in result] == [1, 3]


def test_transitions_by_other_users_are_ignored(make_api):
    api, _ = make_api({})
    issue = {
        "id": 1,
        "journals": [
            _journal(9, "2024-01-01T10:00:00Z", "7"),
            _journal(5, "2024-01-02T10:00:00Z", "16"),
        ],
    }
    assert api.filter_issues_user_moved_to_code_review([issue], 5) == []
    assert api.filter_issues_user_moved_to_code_review([issue], 9) == []


def test_ft_review_transition(make_api):
    api, _ = make_api({})
    issue = {
        "id": 4,
        "journals": [
            _journal(5, "2024-01-01T10:00:00Z", "2"),
            _journal(5, "2024-01-01T12:00:00Z", "11"),
        ],
    }
    assert api.filter_issues_user_moved_to_ft_review([issue], 5) == [issue]
    assert api.filter_issues_user_moved_to_code_review([issue], 5) == []


def test_custom_transition_rule(make_api):
    rule = StatusTransitionRule("code_review", first_status_id="3", second_status_id="4")
    api, _ = make_api({}, transition_rules={"code_review": rule})
    issue = {
        "id": 1,
        "journals": [_journal(5, "2024-01-01T10:00:00Z", "3"), _journal(5, "2024-01-02T10:00:00Z", "4")],
    }
    assert api.filter_issues_user_moved_to_code_review([issue], 5) == [issue]


# ------------------ Orchestration ------------------


def _orchestration_routes():
    return {
        "projects.json": {"projects": [{"id": 42, "name": "Apollo"}]},
        "issues.json": {
            "issues": [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}],
            "total_count": 4,
        },
        "issues/1.json": {
            "issue": {
                "id": 1,
                "journals": [
                    _journal(5, "2024-01-01T10:00:00Z", "7"),
                    _journal(5, "2024-01-02T10:00:00Z", "16"),
                    _journal(5, "2024-01-03T10:00:00Z", "2"),
                    _journal(5, "2024-01-04T10:00:00Z", "11"),
                ],
            }
        },
        "issues/2.json": {
            "issue": {
                "id": 2,
                "journals": [
                    _journal(5, "2024-01-01T10:00:00Z", "2"),
                    _journal(5, "2024-01-02T10:00:00Z", "11"),
                ],
            }
        },
        "issues/3.json": {"issue": {"id": 3, "journals": [_journal(5, "2024-01-01T10:00:00Z", "7")]}},
        "issues/4.json": {"issue": {"id": 4, "journals": []}},
        "my/account.json": {"user": {"id": 5, "login": "jdoe"}},
    }


def test_issues_with_user_interaction_unions_both_reviews(make_api):
    api, session = make_api(_orchestration_routes())
    result = api.get_issues_with_user_interaction("Apollo", 5)
    assert sorted(i["id"] for i in result) == [1, 2]
    assert "my/account.json" not in session.endpoints()


def test_issues_with_user_interaction_resolves_username(make_api):
    api, session = make_api(_orchestration_routes())
    result = api.get_issues_with_user_interaction("Apollo", "jdoe")
    assert sorted(i["id"] for i in result) == [1, 2]
    assert "my/account.json" in session.endpoints()


def test_digit_string_is_treated_as_user_id(make_api):
    api, session = make_api(_orchestration_routes())
    result = api.get_issues_with_user_interaction("Apollo", "5")
    assert sorted(i["id"] for i in result) == [1, 2]
    assert "my/account.json" not in session.endpoints()


def test_unknown_user_or_project_yields_empty(make_api):
    routes = _orchestration_routes()
    routes["issues.json"] = {"issues": [], "total_count": 0}
    api, _ = make_api(routes)
    assert api.get_issues_with_user_interaction("Apollo", "ghost") == []
    assert api.get_issues_with_user_interaction("Gemini", 5) == []
