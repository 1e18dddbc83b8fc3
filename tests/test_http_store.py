import pytest
import requests

from courtshuffle.exceptions import NetworkException
from courtshuffle.sync import HttpSessionStore, SyncSettings


class FakeResponse:
    def __init__(self, data=None, status_code=200, body_error=False):
        self.data = data
        self.status_code = status_code
        self.body_error = body_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Server Error")

    def json(self):
        if self.body_error:
            raise ValueError("Expecting value")
        return self.data


class FakeHttp:
    """Records requests and answers from a queue of responses or exceptions."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def _answer(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        answer = self.responses.pop(0)
        if isinstance(answer, Exception):
            raise answer
        return answer

    def post(self, url, **kwargs):
        return self._answer("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._answer("GET", url, **kwargs)


def _store(*responses):
    http = FakeHttp(*responses)
    settings = SyncSettings(api_url="https://api.test", timeout=2.0, user_id="dev-1")
    return HttpSessionStore(settings, session=http), http


def _ok(**fields):
    return FakeResponse({"status": "success", **fields})


def test_create_session_posts_metadata_without_scores():
    store, http = _store(_ok(session_id=12, share_code="ABC234"))

    created = store.create_session({"group_name": "Tuesday", "schedule": []})

    assert (created.session_id, created.share_code) == ("12", "ABC234")
    method, url, kwargs = http.calls[0]
    assert method == "POST"
    assert url == "https://api.test/collab_create_session.php"
    assert kwargs["json"] == {"group_name": "Tuesday", "schedule": [], "scores": {}}
    assert kwargs["timeout"] == 2.0


def test_create_session_without_share_code_fails():
    store, _ = _store(_ok(session_id=12))
    with pytest.raises(NetworkException):
        store.create_session({})


def test_join_session_fetches_full_score_set():
    store, http = _store(
        _ok(
            session={"id": 5, "share_code": "ABC234", "group_name": "Tuesday"},
            schedule=[{"id": "round-0"}],
            players=[{"id": "p1"}],
        ),
        _ok(
            updates=[
                {
                    "round_idx": 0,
                    "game_idx": 1,
                    "s1_str": "11",
                    "s2_str": None,
                    "updated_at": 700,
                }
            ],
            latest_timestamp=900,
            connected_users=3,
        ),
    )

    joined = store.join_session("ABC234")

    assert joined.session_id == "5"
    assert joined.metadata["group_name"] == "Tuesday"
    assert joined.metadata["schedule"] == [{"id": "round-0"}]
    assert joined.metadata["players"] == [{"id": "p1"}]
    assert [(u.game_idx, u.s1, u.s2) for u in joined.updates] == [(1, "11", "")]
    assert joined.latest_timestamp == 900
    assert joined.connected_count == 3

    assert http.calls[0][2]["json"] == {"share_code": "ABC234", "user_id": "dev-1"}
    method, url, kwargs = http.calls[1]
    assert (method, url) == ("GET", "https://api.test/collab_get_scores.php")
    assert kwargs["params"] == {"share_code": "ABC234", "since": 0, "user_id": "dev-1"}


def test_upsert_uses_wire_field_names():
    store, http = _store(_ok())

    store.upsert_scores("ABC234", "5", 2, 1, "11", "7", 123456)

    _, url, kwargs = http.calls[0]
    assert url.endswith("/collab_sync_scores.php")
    assert kwargs["json"] == {
        "share_code": "ABC234",
        "session_id": "5",
        "round_idx": 2,
        "game_idx": 1,
        "s1_str": "11",
        "s2_str": "7",
        "updated_at": 123456,
    }


def test_poll_reads_session_status():
    store, http = _store(
        _ok(updates=[], latest_timestamp=0, session_status="finished", group_name="G")
    )

    response = store.poll_updates("ABC234", 55, user_id="other")

    assert response.finished
    assert response.group_name == "G"
    assert response.connected_count == 0
    assert http.calls[0][2]["params"]["since"] == 55
    assert http.calls[0][2]["params"]["user_id"] == "other"


def test_finish_session_posts_ids():
    store, http = _store(_ok())
    store.finish_session("ABC234", "5")
    _, url, kwargs = http.calls[0]
    assert url.endswith("/collab_finish_session.php")
    assert kwargs["json"] == {"share_code": "ABC234", "session_id": "5"}


@pytest.mark.parametrize(
    "answer",
    [
        requests.ConnectionError("refused"),
        requests.Timeout("slow"),
        FakeResponse(status_code=500),
        FakeResponse(body_error=True),
        FakeResponse(["not", "a", "dict"]),
        FakeResponse({"status": "error", "message": "Session not found"}),
    ],
)
def test_failures_become_network_exceptions(answer):
    store, _ = _store(answer)
    with pytest.raises(NetworkException):
        store.finish_session("ABC234", "5")


def test_server_message_is_kept():
    store, _ = _store(FakeResponse({"status": "error", "message": "Session not found"}))
    with pytest.raises(NetworkException, match="Session not found"):
        store.poll_updates("ABC234", 0)


def test_malformed_update_is_a_network_exception():
    store, _ = _store(_ok(updates=[{"game_idx": 0}]))
    with pytest.raises(NetworkException):
        store.poll_updates("ABC234", 0)
