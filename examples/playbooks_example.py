"""
Example showing how to drive playbooks with the amp-client.

This is a small, non-running example (placeholder base_url and token).
Set AMP_BASE_URL / AMP_API_TOKEN to point it at a real server.
"""

from amp_client import AmpError, Client, PlaybookPayload, Preface


if __name__ == "__main__":
    with Client.from_env() as client:
        try:
            account = client.accounts().me()
            print("Signed in as:", account.email)

            playbook = client.playbooks().create(
                PlaybookPayload(
                    title="Untitled",
                    preface=Preface(
                        name="amp-example-go",
                        repository={"repo": "https://github.com/amphitheatre-app/amp-example-go"},
                    ),
                )
            )
            print("Playbook id:", playbook.id)
            print("Start:", client.playbooks().start(playbook.id))

            with client.playbooks().events(playbook.id) as events:
                for event in events:
                    if event.is_message:
                        print("Event:", event.event, event.data)
                    elif event.is_error:
                        print("Stream error:", event.error)
                        break
        except AmpError as exc:  # pragma: no cover - runtime example
            print("Request failed:", exc)
