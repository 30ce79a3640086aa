"""CLI tool for managing a fuse-inventory data directory."""

import json
from pathlib import Path
from typing import Optional
from uuid import UUID

import typer
from typing_extensions import Annotated

from fuse_inventory.config import FuseSettings
from fuse_inventory.errors import StoreLoadError
from fuse_inventory.models.commands import (
    CreateSecurityUser,
    DeleteUser,
    UpdateSecuritySettings,
    UpdateUser,
)
from fuse_inventory.models.enums import SecurityLevel, SecurityRole
from fuse_inventory.models.result import Result
from fuse_inventory.observability.logging import setup_logging
from fuse_inventory.persistence.json_store import JsonSnapshotStore, data_file_schemas
from fuse_inventory.security.service import SecurityService


app = typer.Typer(help="fuse-inventory management CLI")
user_app = typer.Typer(help="Manage security users")
settings_app = typer.Typer(help="Manage security settings")

app.add_typer(user_app, name="user")
app.add_typer(settings_app, name="settings")


@app.callback()
def main(
    log_level: Annotated[
        Optional[str], typer.Option(help="Enable JSON logging at this level")
    ] = None,
):
    if log_level:
        setup_logging(log_level)


def get_store() -> JsonSnapshotStore:
    return JsonSnapshotStore(FuseSettings.from_env().data_dir)


def get_service() -> SecurityService:
    settings = FuseSettings.from_env()
    return SecurityService(
        JsonSnapshotStore(settings.data_dir),
        session_lifetime=settings.session_lifetime,
    )


def _fail_on_error(result: Result) -> None:
    if not result.is_success:
        typer.echo(f"Error ({result.error_type.value}): {result.error}", err=True)
        raise typer.Exit(code=1)


@app.command("validate")
def validate():
    """Loads the data directory and reports integrity violations."""
    store = get_store()
    try:
        store.load()
    except StoreLoadError as e:
        typer.echo(f"Data directory {store.data_dir} is invalid:", err=True)
        for error in e.errors:
            typer.echo(f"  - {error}", err=True)
        raise typer.Exit(code=1)
    typer.echo(f"Data directory {store.data_dir} is valid.")


@app.command("export-schemas")
def export_schemas(
    output: Annotated[
        Path, typer.Option(help="Directory to write the schemas to")
    ] = Path("docs/schemas"),
):
    """Writes a JSON Schema for every data file."""
    output.mkdir(parents=True, exist_ok=True)
    for file_name, schema in data_file_schemas().items():
        (output / file_name).write_text(json.dumps(schema, indent=2), encoding="utf-8")
    typer.echo(f"Schemas written to {output}")


@app.command("state")
def state():
    """Shows the security level and the users."""
    security = get_service().get_security_state()
    typer.echo(f"Security level: {security.settings.level.value}")
    typer.echo(f"Requires setup: {security.requires_setup}")
    if not security.users:
        typer.echo("No users found.")
        return
    for u in security.users:
        typer.echo(f"[{u.role.value}] {u.user_name} ({u.id})")


@user_app.command("create")
def user_create(
    username: Annotated[str, typer.Option(help="Username")],
    password: Annotated[
        str, typer.Option(help="Password", prompt=True, hide_input=True)
    ],
    role: Annotated[SecurityRole, typer.Option(help="Role")] = SecurityRole.ADMIN,
    requested_by: Annotated[
        Optional[UUID], typer.Option(help="Id of the administrator creating the user")
    ] = None,
):
    """Creates a user. The first user must be an administrator."""
    result = get_service().create_user(
        CreateSecurityUser(
            user_name=username,
            password=password,
            role=role,
            requested_by=requested_by,
        )
    )
    _fail_on_error(result)
    typer.echo(f"User created: {result.value.user_name} ({result.value.id})")


@user_app.command("set-role")
def user_set_role(
    user_id: Annotated[UUID, typer.Argument(help="User id")],
    role: Annotated[SecurityRole, typer.Argument(help="New role")],
):
    """Changes a user's role."""
    result = get_service().update_user(UpdateUser(id=user_id, role=role))
    _fail_on_error(result)
    typer.echo(f"Role of {result.value.user_name} set to {role.value}")


@user_app.command("delete")
def user_delete(user_id: Annotated[UUID, typer.Argument(help="User id")]):
    """Deletes a user."""
    _fail_on_error(get_service().delete_user(DeleteUser(id=user_id)))
    typer.echo(f"User deleted: {user_id}")


@settings_app.command("set-level")
def settings_set_level(
    level: Annotated[SecurityLevel, typer.Argument(help="Security level")],
    requested_by: Annotated[
        UUID, typer.Option(help="Id of the requesting administrator")
    ],
):
    """Changes the security level."""
    result = get_service().update_security_settings(
        UpdateSecuritySettings(level=level, requested_by=requested_by)
    )
    _fail_on_error(result)
    typer.echo(f"Security level set to {result.value.level.value}")


if __name__ == "__main__":
    app()
