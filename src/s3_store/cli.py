# cli.py
import click
import logging

from s3_store.adapters.settings_store import JsonFileSettingsProvider
from s3_store.config.settings import get_settings
from s3_store.config.storage import DEFAULT_REGION, StorageConfiguration
from s3_store.errors import StoreError
from s3_store.factory import StoreFactory
from s3_store.schemas import mask_secret
from s3_store.validation import validate_configuration

# Configure logging
logger = logging.getLogger(__name__)


def _services(ctx):
    try:
        return StoreFactory.create_services(ctx.obj["settings"], ctx.obj["provider"])
    except StoreError as e:
        raise click.ClickException(str(e))


@click.group()
@click.option("--settings-file", default=None, help="JSON file holding the storage options")
@click.pass_context
def cli(ctx, settings_file):
    """CLI commands for the S3 file store"""
    settings = get_settings()
    logging.basicConfig(level=settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings
    ctx.obj["provider"] = JsonFileSettingsProvider(settings_file or settings.settings_file)


@cli.command()
@click.pass_context
def show_config(ctx):
    """Show current configuration"""
    settings = ctx.obj["settings"]
    config = StorageConfiguration.from_provider(ctx.obj["provider"])

    click.echo("Current Configuration:")
    click.echo(f"  Settings File: {ctx.obj['provider'].settings_file}")
    click.echo(f"  Endpoint: {settings.aws_endpoint_url or 'AWS default'}")
    click.echo(f"  Access Key Id: {config.access_key_id}")
    click.echo(f"  Secret Access Key: {mask_secret(config.secret_access_key)}")
    click.echo(f"  Bucket: {config.bucket}")
    click.echo(f"  Region: {config.region}")
    click.echo(f"  Expiration (minutes): {config.expiration_minutes}")
    click.echo(f"  Archive Organizer: {'active' if settings.archive_repertory_active else 'inactive'}")


@cli.command()
@click.option("--access-key-id", prompt=True, help="First part of the access keys")
@click.option("--secret-access-key", prompt=True, hide_input=True, help="Second part of the access keys")
@click.option("--bucket", prompt=True, help="Bucket the files are stored in")
@click.option("--region", default=DEFAULT_REGION, show_default=True, help="Region of the bucket")
@click.option("--expiration", type=click.IntRange(min=0), default=0, show_default=True,
              help="Minutes signed URLs stay valid; 0 uploads public files")
@click.option("--skip-check", is_flag=True, help="Save without checking the options with the service")
@click.pass_context
def configure(ctx, access_key_id, secret_access_key, bucket, region, expiration, skip_check):
    """Check and save the storage options"""
    config = StorageConfiguration(
        access_key_id=access_key_id,
        secret_access_key=secret_access_key,
        bucket=bucket,
        region=region,
        expiration_minutes=expiration,
    )

    if not skip_check:
        try:
            store = StoreFactory.create_store(config, ctx.obj["settings"])
        except StoreError as e:
            raise click.ClickException(str(e))
        report = validate_configuration(store, config)
        if not report.valid:
            for error in report.errors:
                click.echo(f"❌ {error}", err=True)
            ctx.exit(1)

    config.save_to(ctx.obj["provider"])
    click.echo(f"✅ Saved storage settings for bucket {config.bucket}")


@cli.command()
@click.pass_context
def check(ctx):
    """Check the saved options with the service"""
    config = StorageConfiguration.from_provider(ctx.obj["provider"])
    store = _services(ctx).store
    report = validate_configuration(store, config)
    if not report.valid:
        for error in report.errors:
            click.echo(f"❌ {error}", err=True)
        ctx.exit(1)
    click.echo(f"✅ Bucket {config.bucket} is reachable in {report.bucket_region or config.region}")


@cli.command()
@click.argument("source", type=click.Path(exists=True, dir_okay=False))
@click.argument("key")
@click.pass_context
def put(ctx, source, key):
    """Upload a local file to KEY"""
    store = _services(ctx).store
    try:
        store.put(source, key)
    except StoreError as e:
        raise click.ClickException(str(e))
    click.echo(store.get_uri(key))


@cli.command()
@click.argument("source")
@click.argument("destination")
@click.pass_context
def move(ctx, source, destination):
    """Move a stored object (copy, then delete the source)"""
    store = _services(ctx).store
    try:
        store.move(source, destination)
    except StoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"Moved {source} to {destination}")


@cli.command()
@click.argument("key")
@click.pass_context
def delete(ctx, key):
    """Delete a stored object"""
    store = _services(ctx).store
    try:
        store.delete(key)
    except StoreError as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted {key}")


@cli.command()
@click.argument("prefix")
@click.confirmation_option(prompt="Delete every object under this prefix?")
@click.pass_context
def delete_dir(ctx, prefix):
    """Delete every object under PREFIX/"""
    store = _services(ctx).store
    try:
        deleted = store.delete_dir(prefix)
    except (StoreError, ValueError) as e:
        raise click.ClickException(str(e))
    click.echo(f"Deleted {deleted} object(s) under {prefix.strip('/')}/")


@cli.command()
@click.argument("key")
@click.pass_context
def url(ctx, key):
    """Print the URL of a stored object"""
    click.echo(_services(ctx).store.get_uri(key))


if __name__ == "__main__":
    cli()
