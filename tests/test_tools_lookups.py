import pytest
import respx
from httpx import Response
from workfront_client.core.config import ConnectionConfig
from workfront_client.core.errors import WorkfrontClientError
from workfront_client.tools.issues import (
    create_issue_as_user,
    get_issue_by_ext_id,
    get_issue_by_id,
    get_issue_by_ref_nr,
    update_issue_as_user,
)
from workfront_client.tools.projects import (
    create_project_as_user,
    get_project_by_id,
    get_project_by_ref_nr,
)
from workfront_client.tools.tasks import get_task_by_ref_nr, update_task_as_user
from workfront_client.tools.teams import get_team_by_id, get_team_members
from workfront_client.tools.users import (
    get_user_by_email,
    get_user_by_id,
    get_users_by_email,
)
from workfront_client.workfront import Workfront

HOST = "wf.example.com"
API = "/attask/api/v7.0"


@pytest.fixture
def wf():
    return Workfront(
        ConnectionConfig(url=f"https://{HOST}", api_key="mock-key"),
        session_login_delay=0,
    )


def _mock_session():
    respx.post(host=HOST, path=f"{API}/login").mock(
        return_value=Response(200, json={"data": {"userID": "u1", "sessionID": "s1"}})
    )
    respx.get(host=HOST, path=f"{API}/logout").mock(
        return_value=Response(200, json={"data": {"success": True}})
    )


@pytest.mark.asyncio
@respx.mock
async def test_get_by_id_helpers(wf):
    for obj_code, obj_id in (("PROJ", "p1"), ("OPTASK", "i1"), ("USER", "u1"), ("TEAMOB", "t1")):
        respx.get(host=HOST, path=f"{API}/{obj_code}/{obj_id}").mock(
            return_value=Response(200, json={"data": {"ID": obj_id, "objCode": obj_code}})
        )

    async with wf:
        assert (await get_project_by_id(wf, "p1"))["ID"] == "p1"
        assert (await get_issue_by_id(wf, "i1", ["name"]))["objCode"] == "OPTASK"
        assert (await get_user_by_id(wf, "u1"))["ID"] == "u1"
        assert (await get_team_by_id(wf, "t1"))["ID"] == "t1"


@pytest.mark.asyncio
@respx.mock
async def test_get_project_by_ref_nr(wf):
    route = respx.get(host=HOST, path=f"{API}/PROJ/search").mock(
        return_value=Response(200, json={"data": [{"ID": "p1"}, {"ID": "p2"}]})
    )

    async with wf:
        project = await get_project_by_ref_nr(wf, "1001")

    assert project == {"ID": "p1"}
    params = route.calls[0].request.url.params
    assert params["referenceNumber"] == "1001"
    assert params["referenceNumber_Mod"] == "eq"
    assert params["fields"] == "referenceNumber"


@pytest.mark.asyncio
@respx.mock
async def test_get_issue_by_ref_nr_none_found(wf):
    respx.get(host=HOST, path=f"{API}/OPTASK/search").mock(
        return_value=Response(200, json={"data": []})
    )

    async with wf:
        assert await get_issue_by_ref_nr(wf, "42") is None


@pytest.mark.asyncio
@respx.mock
async def test_get_issue_by_ext_id_single_and_ambiguous(wf):
    respx.get(host=HOST, path=f"{API}/OPTASK/search").mock(
        side_effect=[
            Response(200, json={"data": [{"ID": "i1"}]}),
            Response(200, json={"data": [{"ID": "i1"}, {"ID": "i2"}]}),
        ]
    )

    async with wf:
        assert await get_issue_by_ext_id(wf, "<msg@mail>") == {"ID": "i1"}
        with pytest.raises(WorkfrontClientError):
            await get_issue_by_ext_id(wf, "<msg@mail>")


@pytest.mark.asyncio
@respx.mock
async def test_get_task_by_ref_nr_defaults_fields(wf):
    route = respx.get(host=HOST, path=f"{API}/TASK/search").mock(
        return_value=Response(200, json={"data": [{"ID": "t1", "referenceNumber": 5}]})
    )

    async with wf:
        task = await get_task_by_ref_nr(wf, "5")

    assert task["ID"] == "t1"
    assert route.calls[0].request.url.params["fields"] == "referenceNumber"


@pytest.mark.asyncio
@respx.mock
async def test_get_user_by_email_is_case_insensitive(wf):
    route = respx.get(host=HOST, path=f"{API}/USER/search").mock(
        return_value=Response(200, json={"data": [{"ID": "u1"}]})
    )

    async with wf:
        user = await get_user_by_email(wf, "Jane@Example.com", ["emailAddr"])

    assert user == {"ID": "u1"}
    params = route.calls[0].request.url.params
    assert params["emailAddr"] == "Jane@Example.com"
    assert params["emailAddr_Mod"] == "cieq"


@pytest.mark.asyncio
@respx.mock
async def test_get_user_by_email_multiple_raises(wf):
    respx.get(host=HOST, path=f"{API}/USER/search").mock(
        return_value=Response(200, json={"data": [{"ID": "u1"}, {"ID": "u2"}]})
    )

    async with wf:
        with pytest.raises(WorkfrontClientError):
            await get_user_by_email(wf, "dup@example.com")


@pytest.mark.asyncio
@respx.mock
async def test_get_users_by_email_skips_ignored(wf):
    def by_email(request):
        email = request.url.params["emailAddr"]
        if email == "known@example.com":
            return Response(200, json={"data": [{"ID": "u1"}]})
        return Response(200, json={"data": []})

    route = respx.get(host=HOST, path=f"{API}/USER/search").mock(side_effect=by_email)

    async with wf:
        users = await get_users_by_email(
            wf,
            ["known@example.com", "new@example.com", "Support@Example.com"],
            emails_to_ignore=[" support@example.com "],
        )

    assert users == {"known@example.com": {"ID": "u1"}, "new@example.com": None}
    assert route.call_count == 2


@pytest.mark.asyncio
@respx.mock
async def test_get_team_members(wf):
    route = respx.get(host=HOST, path=f"{API}/TEAMOB/t1").mock(
        return_value=Response(
            200, json={"data": {"ID": "t1", "teamMembers": [{"userID": "u1"}]}}
        )
    )

    async with wf:
        members = await get_team_members(wf, "t1")

    assert members == [{"userID": "u1"}]
    assert route.calls[0].request.url.params["fields"] == "ID,name,teamMembers:*"


@pytest.mark.asyncio
@respx.mock
async def test_create_as_user_runs_under_session(wf):
    _mock_session()
    project = respx.post(host=HOST, path=f"{API}/PROJ").mock(
        return_value=Response(200, json={"data": {"ID": "p9"}})
    )
    issue = respx.post(host=HOST, path=f"{API}/OPTASK").mock(
        return_value=Response(200, json={"data": {"ID": "i9"}})
    )

    async with wf:
        assert (await create_project_as_user(wf, "jane@example.com", {"name": "P"}))["ID"] == "p9"
        assert (await create_issue_as_user(wf, "jane@example.com", {"name": "I"}))["ID"] == "i9"

    for route in (project, issue):
        sent = route.calls[0].request
        assert sent.headers["sessionID"] == "s1"
        assert b"apiKey" not in sent.content


@pytest.mark.asyncio
@respx.mock
async def test_update_as_user(wf):
    _mock_session()
    issue = respx.put(host=HOST, path=f"{API}/OPTASK/i1").mock(
        return_value=Response(200, json={"data": {"ID": "i1", "status": "CLS"}})
    )
    task = respx.put(host=HOST, path=f"{API}/TASK/t1").mock(
        return_value=Response(200, json={"data": {"ID": "t1", "percentComplete": 100}})
    )

    async with wf:
        updated = await update_issue_as_user(wf, "jane@example.com", "i1", {"status": "CLS"})
        done = await update_task_as_user(wf, "jane@example.com", "t1", {"percentComplete": 100})

    assert updated["status"] == "CLS"
    assert done["percentComplete"] == 100
    assert issue.calls[0].request.headers["sessionID"] == "s1"
    assert task.calls[0].request.headers["sessionID"] == "s1"
