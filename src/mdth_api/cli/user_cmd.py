"""User management CLI commands."""

import asyncio

import typer

user_app = typer.Typer()


@user_app.command("create")
def create_user(
    username: str = typer.Option(..., prompt=True, help="Username"),
    email: str = typer.Option(..., prompt=True, help="Email address"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True, help="Password"),
    full_name: str | None = typer.Option(None, "--full-name", help="Display name"),
    role: str = typer.Option("user", "--role", help="User role (user/admin)"),
    if_not_exists: bool = typer.Option(
        False,
        "--if-not-exists",
        help="Exit successfully if the username or email is already taken (idempotent mode)",
    ),
) -> None:
    """Create a new user, optionally as an administrator.

    Goes through the same validation and hashing as ``POST /register``.
    """
    asyncio.run(_create_user(username, email, password, full_name, role, if_not_exists=if_not_exists))


async def _create_user(
    username: str,
    email: str,
    password: str,
    full_name: str | None,
    role: str,
    *,
    if_not_exists: bool = False,
) -> None:
    from mdth_api.core.config import get_settings
    from mdth_api.core.database import database_session
    from mdth_api.core.errors import AccountError, ConflictError
    from mdth_api.core.security import TokenService
    from mdth_api.models.user import ROLES
    from mdth_api.services.account_service import AccountService
    from mdth_api.services.user_store import UserStore

    if role not in ROLES:
        typer.echo(f"Error: role must be one of {', '.join(sorted(ROLES))}", err=True)
        raise typer.Exit(code=1)

    settings = get_settings()
    try:
        async with database_session(settings.database_url) as session:
            service = AccountService(UserStore(session), TokenService(settings.jwt_secret_key, settings.jwt_algorithm))
            _, user = await service.register(username, email, password, full_name, role=role)
            typer.echo(f"User '{user.username}' created with role '{user.role}'")
    except ConflictError as e:
        if if_not_exists:
            typer.echo(f"User '{username}' already exists, skipping (--if-not-exists)")
            return
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e
    except AccountError as e:
        typer.echo(f"Error: {e.message}", err=True)
        raise typer.Exit(code=1) from e


@user_app.command("promote")
def promote_user(
    identifier: str = typer.Argument(..., help="Username or email of the user to promote"),
) -> None:
    """Grant the admin role to an existing active user."""
    asyncio.run(_promote_user(identifier))


async def _promote_user(identifier: str) -> None:
    from mdth_api.core.config import get_settings
    from mdth_api.core.database import database_session
    from mdth_api.models.user import ROLE_ADMIN
    from mdth_api.services.user_store import UserStore

    async with database_session(get_settings().database_url) as session:
        store = UserStore(session)
        user = await store.find_by_username_or_email(identifier)
        if user is None:
            typer.echo(f"Error: no active user matches '{identifier}'", err=True)
            raise typer.Exit(code=1)
        user = await store.set_role(user.id, ROLE_ADMIN)
        typer.echo(f"User '{user.username}' is now an admin")


@user_app.command("list")
def list_users() -> None:
    """List active users, newest first."""
    asyncio.run(_list_users())


async def _list_users() -> None:
    from mdth_api.core.config import get_settings
    from mdth_api.core.database import database_session
    from mdth_api.services.user_store import UserStore

    async with database_session(get_settings().database_url) as session:
        users = await UserStore(session).list_active()

    typer.echo(f"{'Username':<20} {'Email':<30} {'Role':<8} {'Created':<20}")
    typer.echo("-" * 80)
    for user in users:
        created = user.created_at.strftime("%Y-%m-%d %H:%M:%S")
        typer.echo(f"{user.username:<20} {user.email:<30} {user.role:<8} {created:<20}")
    typer.echo(f"\nTotal: {len(users)}")
