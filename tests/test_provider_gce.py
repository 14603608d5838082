import json

import pytest
import respx
from httpx import Response

from computeforge.core.errors import ApiError
from computeforge.domain.models import ResourceKind
from computeforge.orchestration import ApplyEngine, ApplyStatus, OutcomeStatus
from computeforge.providers import create_provider
from computeforge.providers.gce import GceInstanceResource, GoogleComputeProvider, image_link

from conftest import ATTACHMENT_ID

BASE = "https://compute.test/compute/v1"
PROJECT = f"{BASE}/projects/acme-prod"
ADDRESS_URL = f"{PROJECT}/regions/us-central1/addresses/web-1-ip"
INSTANCE_URL = f"{PROJECT}/zones/us-central1-a/instances/web-1"
DISK_URL = f"{PROJECT}/zones/us-central1-a/disks/web-1-data"


def _provider() -> GoogleComputeProvider:
    return GoogleComputeProvider("compute-token", base_url=BASE, poll_interval=0)


def _done(target: str) -> Response:
    return Response(200, json={"name": "op", "status": "DONE", "targetLink": target})


def test_provider_is_registered():
    provider = create_provider("gce", token="t", base_url=BASE)

    assert isinstance(provider, GoogleComputeProvider)


@pytest.mark.parametrize(
    "image,expected",
    [
        ("debian-cloud/debian-12", "projects/debian-cloud/global/images/family/debian-12"),
        ("debian-12", "global/images/debian-12"),
        ("projects/p/global/images/i", "projects/p/global/images/i"),
    ],
)
def test_image_link(image, expected):
    assert image_link(image) == expected


def test_instance_body_uses_external_nat(graph):
    spec = graph.by_kind(ResourceKind.instance).spec

    body = GceInstanceResource.instance_body(spec, "34.1.2.3")

    assert body["machineType"] == "zones/us-central1-a/machineTypes/e2-medium"
    assert body["disks"][0]["initializeParams"] == {
        "sourceImage": "projects/debian-cloud/global/images/family/debian-12",
        "diskType": "zones/us-central1-a/diskTypes/pd-balanced",
        "diskSizeGb": "20",
    }
    interface = body["networkInterfaces"][0]
    assert interface["network"] == "projects/acme-prod/global/networks/default"
    assert interface["accessConfigs"][0]["natIP"] == "34.1.2.3"
    assert interface["accessConfigs"][0]["networkTier"] == "PREMIUM"


def test_instance_body_uses_network_ip_for_internal_address(graph):
    spec = dict(graph.by_kind(ResourceKind.instance).spec) | {"address_type": "INTERNAL"}

    interface = GceInstanceResource.instance_body(spec, "10.0.0.5")["networkInterfaces"][0]

    assert interface["networkIP"] == "10.0.0.5"
    assert "accessConfigs" not in interface


@pytest.mark.asyncio
async def test_lookup_returns_none_on_404(graph):
    provider = _provider()

    with respx.mock:
        respx.get(ADDRESS_URL).mock(return_value=Response(404))

        found = await provider.resource(ResourceKind.address).lookup(graph.by_kind(ResourceKind.address))

    assert found is None


@pytest.mark.asyncio
async def test_lookup_returns_self_link(graph):
    provider = _provider()

    with respx.mock:
        respx.get(DISK_URL).mock(return_value=Response(200, json={"selfLink": DISK_URL}))

        found = await provider.resource(ResourceKind.disk).lookup(graph.by_kind(ResourceKind.disk))

    assert found == DISK_URL


@pytest.mark.asyncio
async def test_api_errors_become_api_error(graph):
    provider = _provider()

    with respx.mock:
        respx.post(f"{PROJECT}/zones/us-central1-a/disks").mock(
            return_value=Response(403, json={"error": {"message": "denied"}})
        )

        with pytest.raises(ApiError) as excinfo:
            await provider.resource(ResourceKind.disk).create(graph.by_kind(ResourceKind.disk), {})

    assert excinfo.value.status_code == 403


@pytest.mark.asyncio
async def test_failed_operation_becomes_api_error(graph):
    provider = _provider()

    with respx.mock:
        respx.post(f"{PROJECT}/regions/us-central1/addresses").mock(
            return_value=Response(
                200,
                json={
                    "name": "op",
                    "status": "DONE",
                    "error": {"errors": [{"code": "IP_SPACE_EXHAUSTED", "message": "no IPs"}]},
                },
            )
        )

        with pytest.raises(ApiError, match="IP_SPACE_EXHAUSTED"):
            await provider.resource(ResourceKind.address).create(graph.by_kind(ResourceKind.address), {})


@pytest.mark.asyncio
async def test_attachment_lookup_scans_instance_disks(graph):
    provider = _provider()
    instance = {
        "selfLink": INSTANCE_URL,
        "disks": [
            {"source": f"{PROJECT}/zones/us-central1-a/disks/web-1-boot", "deviceName": "boot"},
            {"source": DISK_URL, "deviceName": "web-1-data"},
        ],
    }

    with respx.mock:
        respx.get(INSTANCE_URL).mock(return_value=Response(200, json=instance))

        found = await provider.resource(ResourceKind.attachment).lookup(graph.node(ATTACHMENT_ID))

    assert found == f"{INSTANCE_URL}/disks/web-1-data"


@pytest.mark.asyncio
async def test_attachment_lookup_without_disk_is_absent(graph):
    provider = _provider()

    with respx.mock:
        respx.get(INSTANCE_URL).mock(return_value=Response(200, json={"selfLink": INSTANCE_URL, "disks": []}))

        assert await provider.resource(ResourceKind.attachment).lookup(graph.node(ATTACHMENT_ID)) is None


@pytest.mark.asyncio
async def test_full_apply_against_compute_api(graph):
    provider = _provider()
    op_link = f"{PROJECT}/zones/us-central1-a/operations/op-instance"

    with respx.mock:
        address_get = respx.get(ADDRESS_URL)
        address_get.side_effect = [Response(404), Response(200, json={"address": "34.1.2.3"})]
        instance_get = respx.get(INSTANCE_URL)
        instance_get.side_effect = [
            Response(404),
            Response(200, json={"selfLink": INSTANCE_URL, "disks": []}),
        ]
        respx.get(DISK_URL).mock(return_value=Response(404))

        respx.post(f"{PROJECT}/regions/us-central1/addresses").mock(return_value=_done(ADDRESS_URL))
        insert_instance = respx.post(f"{PROJECT}/zones/us-central1-a/instances").mock(
            return_value=Response(200, json={"name": "op-instance", "status": "RUNNING", "selfLink": op_link})
        )
        respx.get(op_link).mock(return_value=_done(INSTANCE_URL))
        respx.post(f"{PROJECT}/zones/us-central1-a/disks").mock(return_value=_done(DISK_URL))
        attach = respx.post(f"{INSTANCE_URL}/attachDisk").mock(return_value=_done(INSTANCE_URL))

        outcome = await ApplyEngine(provider).apply(graph)

    assert outcome.status == OutcomeStatus.success, outcome.summary
    assert [r.status for r in outcome.results] == [ApplyStatus.created] * 4
    assert outcome.results[-1].remote_id == f"{INSTANCE_URL}/disks/web-1-data"

    instance_body = json.loads(insert_instance.calls.last.request.content)
    assert instance_body["networkInterfaces"][0]["accessConfigs"][0]["natIP"] == "34.1.2.3"
    assert insert_instance.calls.last.request.headers["Authorization"] == "Bearer compute-token"

    attach_body = json.loads(attach.calls.last.request.content)
    assert attach_body == {"source": DISK_URL, "deviceName": "web-1-data", "autoDelete": False}
