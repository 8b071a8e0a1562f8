"""
Flask CLI commands for VKontakte plugin management.

These commands help with setup and debugging of the VKontakte
integration.
"""

import json

import click
import httpx
from flask.cli import with_appcontext

from .config import PluginConfig
from .errors import InternalOAuthError, ProfileParseError


@click.group("vkontakte")
def vkontakte_cli():
    """VKontakte token generator management commands."""
    pass


@vkontakte_cli.command("show-config")
@with_appcontext
def show_config():
    """Display current VKontakte configuration."""
    config = PluginConfig.from_env()
    vk = config.vkontakte

    click.echo("=== VKontakte Configuration ===")
    click.echo(f"Client ID: {vk.client_id[:8] + '...' if vk.client_id else 'Not configured'}")
    click.echo(f"Client Secret: {'Configured' if vk.client_secret else 'Not configured'}")
    click.echo(f"Authorization URL: {vk.authorization_url}")
    click.echo(f"Token URL: {vk.token_url}")
    click.echo(f"Profile URL: {vk.profile_url}")
    click.echo(f"API Version: {vk.api_version}")
    click.echo(f"Profile Fields: {','.join(vk.profile_fields)}")
    click.echo(f"Token Fields: {vk.access_token_field}, {vk.refresh_token_field}")
    click.echo(f"Pass Request To Callback: {vk.pass_req_to_callback}")

    click.echo("\n=== JWT Configuration ===")
    click.echo(f"Private Key File: {config.jwt.private_key_file}")
    click.echo(f"Public Key File: {config.jwt.public_key_file}")
    click.echo(f"Algorithm: {config.jwt.algorithm}")
    click.echo(f"Issuer: {config.jwt.issuer}")
    click.echo(f"Token Expiry: {config.jwt.token_expiry_hours} hours")

    click.echo("\n=== User Provisioning ===")
    click.echo(f"Auto Provision: {config.auto_provision_users}")
    click.echo(f"Default Permissions: {config.default_user_permissions}")
    click.echo(f"Username Prefix: {config.username_prefix}")


@vkontakte_cli.command("validate-config")
@with_appcontext
def validate_config():
    """Validate the current configuration."""
    from pathlib import Path

    config = PluginConfig.from_env()
    errors = []
    warnings = []

    if not Path(config.jwt.private_key_file).exists():
        errors.append(f"JWT private key not found: {config.jwt.private_key_file}")
    if not Path(config.jwt.public_key_file).exists():
        errors.append(f"JWT public key not found: {config.jwt.public_key_file}")

    if not config.vkontakte.client_id:
        warnings.append("VKONTAKTE_CLIENT_ID not configured")
    if not config.vkontakte.client_secret:
        warnings.append("VKONTAKTE_CLIENT_SECRET not configured")
    if not config.vkontakte.profile_fields:
        errors.append("VKONTAKTE_PROFILE_FIELDS is empty")

    if warnings:
        click.echo("=== Warnings ===")
        for warning in warnings:
            click.echo(f"  ! {warning}")

    if errors:
        click.echo("\n=== Errors ===")
        for error in errors:
            click.echo(f"  x {error}")
        click.echo(f"\nConfiguration validation failed with {len(errors)} error(s)")
        return

    click.echo("\n[OK] Configuration is valid!")


@vkontakte_cli.command("test-connection")
@with_appcontext
def test_connection():
    """Test connectivity to the VKontakte endpoints."""
    config = PluginConfig.from_env()

    click.echo("=== Testing VKontakte Connectivity ===\n")

    endpoints = [
        ("Authorization URL", config.vkontakte.authorization_url),
        ("Token URL", config.vkontakte.token_url),
        ("Profile URL", config.vkontakte.profile_url),
    ]
    for label, url in endpoints:
        if not url:
            click.echo(f"[SKIP] {label} not configured")
            continue
        try:
            with httpx.Client() as client:
                client.get(url, follow_redirects=True, timeout=10)
            click.echo(f"[OK] {label} reachable: {url}")
        except httpx.HTTPError as e:
            click.echo(f"[FAIL] {label}: {e}")


@vkontakte_cli.command("fetch-profile")
@click.option("--access-token", required=True, help="VKontakte access token")
@with_appcontext
def fetch_profile(access_token):
    """Load and print the normalized profile for an access token."""
    from .vkontakte import VKontakteTokenStrategy

    config = PluginConfig.from_env()
    strategy = VKontakteTokenStrategy(
        config.vkontakte, lambda *args: args[-1](None, None)
    )

    try:
        profile = strategy.load_profile(access_token)
    except (InternalOAuthError, ProfileParseError) as e:
        click.echo(f"Failed to load profile: {e}", err=True)
        return

    data = profile.to_dict()
    data.pop("_raw")
    click.echo(json.dumps(data, indent=2, ensure_ascii=False))
