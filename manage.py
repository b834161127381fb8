#!/usr/bin/env python
import json

import click

from docs_webhooks import create_app
from docs_webhooks.routing import is_release_eligible, release_intent, route_push
from docs_webhooks.types import PushEvent, ReleaseEvent
from docs_webhooks.utils import environ_get


app = create_app()

@click.group()
def cli():
    pass

@click.command()
@click.option("--port", type=int, default=lambda: int(environ_get("PORT", "3000")))
def serve(port):
    "Runs the webhook server"
    click.echo(f"API listening on port {port}")
    app.run(host="0.0.0.0", port=port)


@click.command()
def latest():
    "Shows the latest published version and its release line"
    info = app.extensions["docs_webhooks"].github.get_latest_information()
    click.echo(f"{info.version} ({info.branch})")


@click.command()
@click.argument("payload_file", type=click.File("r"))
@click.option("--event", type=click.Choice(["push", "release"]), default="push")
def route(payload_file, event):
    "Shows the dispatches a webhook payload would cause, without sending them"
    relay = app.extensions["docs_webhooks"]
    payload = json.load(payload_file)
    info = relay.github.get_latest_information()
    click.echo(f"Latest: {info.version} ({info.branch}), policy: {relay.rules.policy.value}")
    if event == "push":
        intents = route_push(PushEvent.from_payload(payload), info, relay.rules)
    else:
        release = ReleaseEvent.from_payload(payload)
        intents = []
        if is_release_eligible(release, info):
            intents = [release_intent(f"<sha of {release.tag_name}>", relay.rules)]
    if not intents:
        click.echo("No dispatches")
    for intent in intents:
        click.echo(str(intent))


cli.add_command(serve)
cli.add_command(latest)
cli.add_command(route)


if __name__ == "__main__":
    cli()
