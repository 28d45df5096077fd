"""Tests for the Actors API."""

import json

import pytest

from amp_client import EventKinds, ListOptions, StreamEndedError, SyncPath, Synchronization


class TestListActors:
    def test_list_actors(self, setup_mock_for):
        """list() returns the actors of the playbook in server order."""
        client = setup_mock_for("/playbooks/1/actors", "actors/list-actors-success", "GET")

        actors = client.actors().list("1")

        assert len(actors) == 1
        actor = actors[0]
        assert actor.name == "amp-example-go"
        assert actor.image == "amp-example-go:latest"
        assert actor.source == {
            "repo": "https://github.com/amphitheatre-app/amp-example-go",
            "branch": "master",
        }

    def test_list_actors_empty(self, setup_mock_for):
        """An empty collection is an empty list, not an error."""
        client = setup_mock_for("/playbooks/1/actors", "actors/list-actors-empty", "GET")

        assert client.actors().list("1") == []

    def test_list_actors_with_options(self, setup_mock_for, requests):
        """Sort options become query parameters."""
        client = setup_mock_for("/playbooks/1/actors", "actors/list-actors-success", "GET")

        client.actors().list("1", ListOptions(sort_by="label", descending=True))

        assert requests[0].url.params["sort"] == "-label"

    def test_list_actors_with_mapping_options(self, setup_mock_for, requests):
        """Plain mappings are passed through untouched."""
        client = setup_mock_for("/playbooks/1/actors", "actors/list-actors-success", "GET")

        client.actors().list("1", {"sort": "email"})

        assert requests[0].url.params["sort"] == "email"


class TestGetActor:
    def test_get_actor(self, setup_mock_for):
        client = setup_mock_for("/actors/1/hello", "actors/get-actor-success", "GET")

        actor = client.actors().get("1", "hello")

        assert actor.name == "amp-example-go"
        assert actor.description == "A simple Go example app"
        assert actor.raw["image"] == "amp-example-go:latest"
        assert actor.source["branch"] == "master"
        assert actor.character["meta"]["version"] == "0.0.1"

    def test_get_actor_info(self, setup_mock_for):
        """info() returns the untyped JSON map."""
        client = setup_mock_for("/actors/1/hello/info", "actors/get-actor-info-success", "GET")

        info = client.actors().info("1", "hello")

        assert info["environments"]["K3S_TOKEN"] == "RdqNLMXRiRsHJhmxKurR"
        assert (
            info["mounts"]["/VAR/LOG"]
            == "/var/lib/docker/volumes/f64c2f2cf81cfde89879f2a17924b31bd2f2e6a6a738f7df949bf6bd57102d25/_data"
        )
        assert info["port"]["6443/tcp"] == "0.0.0.0:42397"

    def test_get_actor_stats(self, setup_mock_for):
        client = setup_mock_for("/actors/1/hello/stats", "actors/get-actor-stats-success", "GET")

        stats = client.actors().stats("1", "hello")

        assert stats["CPU USAGE"] == "1.98%"
        assert stats["DISK READ/WRITE"] == "5.3MB / 43.7 MB"
        assert stats["MEMORY USAGE"] == "65.8MB"
        assert stats["NETWORK I/O"] == "5.7 kB / 3 kB"


class TestActorLogs:
    def test_get_actor_logs(self, setup_mock_for):
        """The log stream yields open, the messages, then an error at stream end."""
        client = setup_mock_for("/actors/1/hello/logs", "actors/get-actor-logs-success", "GET")

        events = []
        with client.actors().logs("1", "hello") as logs:
            for event in logs:
                events.append(event)
                if event.is_error:
                    logs.close()

        assert [e.type for e in events] == ["open", "message", "message", "error"]
        assert events[1].data == "Starting server on :8080"
        assert events[1].id == "1"
        assert events[2].event == "log"
        assert events[2].data == "GET / 200\nGET /healthz 200"
        assert isinstance(events[3].error, StreamEndedError)
        assert logs.closed

    def test_logs_request_accepts_event_stream(self, setup_mock_for, requests):
        client = setup_mock_for("/actors/1/hello/logs", "actors/get-actor-logs-success", "GET")

        logs = client.actors().logs("1", "hello")
        assert next(logs).is_open
        logs.close()

        assert requests[0].headers["Accept"] == "text/event-stream"
        assert requests[0].url.path == "/v1/actors/1/hello/logs"


class TestSyncActor:
    def test_sync_actor(self, setup_mock_for, requests):
        """sync() returns the transport status, 202 Accepted."""
        client = setup_mock_for("/actors/1/hello/sync", "actors/sync-actor-success", "POST")

        payload = Synchronization(kind=EventKinds.CREATE, paths=[SyncPath.file("a.txt")])
        status = client.actors().sync("1", "hello", payload)

        assert status == 202
        assert json.loads(requests[0].content) == {
            "kind": "create",
            "paths": [{"file": "a.txt"}],
            "attributes": None,
            "payload": None,
        }

    def test_sync_payload_bytes(self):
        payload = Synchronization(
            kind=EventKinds.MODIFY,
            paths=[SyncPath.directory("src")],
            payload=b"\x00\x01",
        )

        assert payload.to_dict()["paths"] == [{"directory": "src"}]
        assert payload.to_dict()["payload"] == [0, 1]

    def test_unknown_kind_rejected(self):
        with pytest.raises(ValueError):
            Synchronization(kind="explode", paths=[])
