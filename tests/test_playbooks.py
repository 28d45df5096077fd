"""Tests for the Playbooks API."""

import json

import pytest

from amp_client import (
    DeserializationError,
    HTTPStatusError,
    PlaybookPayload,
    Preface,
    StreamEndedError,
)

PLAYBOOK_ID = "a82abba3-df2f-4608-b1a5-9e058ff80468"


def untitled_payload(**kwargs):
    return PlaybookPayload(title="Untitled", description="", preface=Preface(), **kwargs)


class TestListPlaybooks:
    def test_list_playbooks(self, setup_mock_for):
        client = setup_mock_for("/playbooks", "playbooks/list-playbooks-success", "GET")

        playbooks = client.playbooks().list()

        assert len(playbooks) == 1
        playbook = playbooks[0]
        assert playbook.id == PLAYBOOK_ID
        assert playbook.title == "Untitled"
        assert playbook.description == ""
        assert playbook.preface.name == "amp-example-go"
        assert playbook.created_at == "2016-01-19T20:50:26Z"

    def test_list_playbooks_empty(self, setup_mock_for):
        client = setup_mock_for("/playbooks", "playbooks/list-playbooks-empty", "GET")

        assert client.playbooks().list() == []

    def test_list_sends_no_query_without_options(self, setup_mock_for, requests):
        client = setup_mock_for("/playbooks", "playbooks/list-playbooks-success", "GET")

        client.playbooks().list()

        assert requests[0].url.query == b""


class TestPlaybookCrud:
    def test_create_playbook(self, setup_mock_for, requests):
        client = setup_mock_for("/playbooks", "playbooks/create-playbook-created", "POST")

        playbook = client.playbooks().create(untitled_payload())

        assert playbook.id == PLAYBOOK_ID
        assert playbook.title == "Untitled"
        assert playbook.description == ""
        body = json.loads(requests[0].content)
        assert body == {
            "title": "Untitled",
            "description": "",
            "preface": {"name": "", "repository": None, "registry": None, "manifest": None},
        }

    def test_live_flag_only_sent_when_set(self):
        assert "live" not in untitled_payload().to_dict()
        assert untitled_payload(live=True).to_dict()["live"] is True

    def test_create_then_get_round_trip(self, setup_mock_for):
        """A created playbook reads back with the same title and description."""
        created = setup_mock_for("/playbooks", "playbooks/create-playbook-created", "POST").playbooks().create(
            untitled_payload()
        )
        fetched = setup_mock_for(
            f"/playbooks/{created.id}", "playbooks/get-playbook-success", "GET"
        ).playbooks().get(created.id)

        assert (fetched.title, fetched.description) == (created.title, created.description)

    def test_get_playbook(self, setup_mock_for):
        client = setup_mock_for(f"/playbooks/{PLAYBOOK_ID}", "playbooks/get-playbook-success", "GET")

        playbook = client.playbooks().get(PLAYBOOK_ID)

        assert playbook.id == PLAYBOOK_ID
        assert playbook.title == "Untitled"
        assert playbook.preface.repository == {
            "repo": "https://github.com/amphitheatre-app/amp-example-go"
        }

    def test_get_playbook_not_found(self, setup_mock_for):
        client = setup_mock_for("/playbooks/0000", "playbooks/notfound-playbook", "GET")

        with pytest.raises(HTTPStatusError) as excinfo:
            client.playbooks().get("0000")

        assert excinfo.value.status == 404
        assert excinfo.value.message == "Playbook `0000` not found"

    def test_get_playbook_malformed_json(self, setup_mock_for):
        """Malformed JSON is a DeserializationError, never a crash."""
        client = setup_mock_for(f"/playbooks/{PLAYBOOK_ID}", "playbooks/get-playbook-malformed", "GET")

        with pytest.raises(DeserializationError):
            client.playbooks().get(PLAYBOOK_ID)

    def test_update_playbook(self, setup_mock_for, requests):
        client = setup_mock_for(f"/playbooks/{PLAYBOOK_ID}", "playbooks/update-playbook-success", "PATCH")

        playbook = client.playbooks().update(PLAYBOOK_ID, untitled_payload())

        assert playbook.id == PLAYBOOK_ID
        assert playbook.title == "Untitled"
        assert requests[0].method == "PATCH"

    def test_delete_playbook(self, setup_mock_for):
        client = setup_mock_for(f"/playbooks/{PLAYBOOK_ID}", "playbooks/delete-playbook-success", "DELETE")

        assert client.playbooks().delete(PLAYBOOK_ID) == 204


class TestPlaybookActions:
    def test_start_playbook(self, setup_mock_for, requests):
        client = setup_mock_for(
            f"/playbooks/{PLAYBOOK_ID}/actions/start", "playbooks/start-playbook-success", "POST"
        )

        assert client.playbooks().start(PLAYBOOK_ID) == 204
        assert requests[0].content == b"null"

    def test_stop_playbook(self, setup_mock_for):
        client = setup_mock_for(
            f"/playbooks/{PLAYBOOK_ID}/actions/stop", "playbooks/stop-playbook-success", "POST"
        )

        assert client.playbooks().stop(PLAYBOOK_ID) == 204


class TestPlaybookEvents:
    def test_get_playbook_events(self, setup_mock_for):
        client = setup_mock_for(
            f"/playbooks/{PLAYBOOK_ID}/events", "playbooks/get-playbook-events-success", "GET"
        )

        events = []
        with client.playbooks().events(PLAYBOOK_ID) as stream:
            for event in stream:
                events.append(event)
                if event.is_error:
                    break

        assert events[0].is_open
        assert events[1].event == "status"
        assert events[1].json() == {"state": "running", "actor": "amp-example-go"}
        assert isinstance(events[2].error, StreamEndedError)
        assert stream.closed

    def test_events_reconnect_until_closed(self, setup_mock_for, requests):
        """Iterating past an error reconnects; the stream only stops on close()."""
        client = setup_mock_for(
            f"/playbooks/{PLAYBOOK_ID}/events", "playbooks/get-playbook-events-success", "GET"
        )

        stream = client.playbooks().events(PLAYBOOK_ID)
        errors = 0
        for event in stream:
            if event.is_error:
                errors += 1
                if errors == 2:
                    stream.close()

        assert errors == 2
        assert len(requests) == 2

    def test_events_rejected_status_ends_stream(self, setup_mock_for):
        """A non-2xx answer is reported once and not retried."""
        client = setup_mock_for("/playbooks/0000/events", "playbooks/notfound-playbook", "GET")

        events = list(client.playbooks().events("0000"))

        assert len(events) == 1
        assert events[0].is_error
        assert events[0].error.status == 404
