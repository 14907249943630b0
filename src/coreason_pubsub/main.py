# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_pubsub

import sys
from pathlib import Path
from typing import Annotated, Optional

import typer

from coreason_pubsub import __version__
from coreason_pubsub.service import open_service
from coreason_pubsub.settings import IMPLEMENTATION_ID_KEY
from coreason_pubsub.synchronizer import BATCH_SIZE
from coreason_pubsub.utils.logger import logger

app = typer.Typer(
    name="coreason-pubsub",
    help="CLI for coreason-pubsub: local concept identity and mapping synchronization.",
    add_completion=False,
)

DbOption = Annotated[
    Optional[Path], typer.Option("--db", help="Path to the DuckDB database (default: $PUBSUB_DB_PATH)")
]


@app.command("implementation-id")
def implementation_id(
    value: Annotated[str, typer.Argument(help="Implementation id of this deployment")],
    db: DbOption = None,
) -> None:
    """
    Set the implementation id the local namespace is named after.
    """
    try:
        service = open_service(db)
        service.settings.set(IMPLEMENTATION_ID_KEY, value.strip())
        typer.echo(f"Implementation id set to '{value.strip()}'")
    except Exception:
        logger.exception("Setting implementation id failed")
        sys.exit(1)


@app.command("init-namespace")
def init_namespace(
    db: DbOption = None,
    force: Annotated[bool, typer.Option("--force", "-f", help="Create a new local namespace even if one is set")] = False,
) -> None:
    """
    Create the local concept source from the implementation id.
    """
    try:
        service = open_service(db)
        if service.has_local_namespace() and not force:
            logger.error("A local namespace is already set. Use --force to create a new one.")
            sys.exit(1)

        source = service.create_local_namespace()
        typer.echo(source.model_dump_json(indent=2))
    except Exception:
        logger.exception("Creating local namespace failed")
        sys.exit(1)


@app.command("local-namespace")
def local_namespace(db: DbOption = None) -> None:
    """
    Show the local concept source.
    """
    try:
        service = open_service(db)
        typer.echo(service.get_local_namespace().model_dump_json(indent=2))
    except Exception:
        logger.exception("Reading local namespace failed")
        sys.exit(1)


@app.command()
def sync(
    db: DbOption = None,
    batch_size: Annotated[int, typer.Option("--batch-size", "-b", help="Concepts per page", min=1)] = BATCH_SIZE,
) -> None:
    """
    Add a local mapping to every concept.
    """
    logger.info("Starting local mapping synchronization")
    try:
        service = open_service(db, batch_size=batch_size)
        report = service.add_local_mappings_to_all_concepts()
        typer.echo(report.model_dump_json(indent=2))
    except Exception:
        logger.exception("Mapping synchronization failed")
        sys.exit(1)


@app.command()
def resolve(
    identifier: Annotated[str, typer.Argument(help="Concept id or 'source:code'")],
    db: DbOption = None,
) -> None:
    """
    Resolve an identifier to a concept.
    """
    try:
        service = open_service(db)
        concept = service.resolve_concept(identifier)
    except Exception:
        logger.exception("Resolving concept failed")
        sys.exit(1)

    if concept is None:
        typer.echo(f"No concept found for '{identifier}'")
        sys.exit(1)
    typer.echo(concept.model_dump_json(indent=2))


@app.command("is-local")
def is_local(
    concept_id: Annotated[int, typer.Argument(help="Concept id")],
    db: DbOption = None,
) -> None:
    """
    Tell whether a concept is local or comes from a subscribed source.
    """
    try:
        service = open_service(db)
        local = service.is_local_concept(concept_id)
        typer.echo("local" if local else "subscribed")
    except Exception:
        logger.exception("Classifying concept failed")
        sys.exit(1)


@app.command()
def subscribed(db: DbOption = None) -> None:
    """
    List the subscribed concept sources.
    """
    try:
        service = open_service(db)
        uuids = service.registry.get_subscribed_uuids()
        sources = service.get_subscribed_namespaces()
    except Exception:
        logger.exception("Listing subscribed sources failed")
        sys.exit(1)

    by_uuid = {s.uuid: s for s in sources if s is not None}
    for source_uuid in uuids:
        source = by_uuid.get(source_uuid)
        typer.echo(f"{source_uuid}\t{source.name if source else '<missing>'}")


@app.command()
def subscribe(
    source_uuid: Annotated[str, typer.Argument(help="UUID of the concept source")],
    db: DbOption = None,
) -> None:
    """
    Add a concept source to the subscribed sources.
    """
    try:
        service = open_service(db)
        uuids = service.subscribe(source_uuid)
        typer.echo(",".join(uuids))
    except Exception:
        logger.exception("Subscribing failed")
        sys.exit(1)


@app.command()
def unsubscribe(
    source_uuid: Annotated[str, typer.Argument(help="UUID of the concept source")],
    db: DbOption = None,
) -> None:
    """
    Remove a concept source from the subscribed sources.
    """
    try:
        service = open_service(db)
        uuids = service.unsubscribe(source_uuid)
        typer.echo(",".join(uuids))
    except Exception:
        logger.exception("Unsubscribing failed")
        sys.exit(1)


@app.command()
def version() -> None:
    """Print the version of coreason-pubsub."""
    typer.echo(f"coreason-pubsub v{__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()  # pragma: no cover
