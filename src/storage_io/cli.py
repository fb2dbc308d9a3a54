"""Command-line interface for storage-io.

This module exposes the storage service operations on the command line.

Commands:
    - ls: List a folder's files and subfolders
    - stat: Show a file's metadata
    - cat: Print a file's content
    - put: Upload a local file
    - rm: Delete a file or folder
    - exists: Check whether a file or folder exists

Storage type must be explicitly specified using --storage-type flag.
Only relevant parameters for each storage type are used.
"""

from typing import Annotated, Optional

import typer

from . import __version__
from .cli_params import (
    AccessKeyOption,
    AwsProfileOption,
    BasePathOption,
    BucketOption,
    EndpointUrlOption,
    OutputOption,
    PathArgument,
    PrefixOption,
    RegionOption,
    RevisionOption,
    SecretKeyOption,
    SessionTokenOption,
    StorageType,
    StorageTypeOption,
)
from .credentials import Credentials, LocalCredentials, S3Credentials
from .manager import StorageService, create_default_manager

app = typer.Typer(
    name="storage-io",
    help="Unified file and folder operations across storage backends.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"storage-io {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    storage-io: Unified storage operations for local directories and S3.

    Storage type must be explicitly specified using --storage-type flag.
    """
    pass


def _create_credentials(
    storage_type: StorageType,
    base_path: Optional[str] = None,
    bucket: Optional[str] = None,
    prefix: str = "",
    access_key_id: Optional[str] = None,
    secret_access_key: Optional[str] = None,
    session_token: Optional[str] = None,
    region_name: Optional[str] = None,
    endpoint_url: Optional[str] = None,
    aws_profile: Optional[str] = None,
) -> Credentials:
    """Create credentials matching the storage type."""
    if storage_type == "local":
        if not base_path:
            raise ValueError("Local storage requires --base-path")
        return LocalCredentials(base_path=base_path)

    elif storage_type == "s3":
        if not bucket:
            raise ValueError("S3 storage requires --bucket")
        return S3Credentials(
            bucket=bucket,
            prefix=prefix,
            access_key_id=access_key_id,
            secret_access_key=secret_access_key,
            session_token=session_token,
            region_name=region_name,
            endpoint_url=endpoint_url,
            aws_profile=aws_profile,
        )

    else:
        raise ValueError(
            f"Invalid storage type: {storage_type}. Must be 'local' or 's3'"
        )


def _open_service(credentials: Credentials) -> StorageService:
    """Register credentials with a fresh manager and bind a service to them."""
    manager = create_default_manager()
    credentials_id = manager.add_credentials(credentials)
    return manager.lookup_service(credentials_id)


@app.command("ls")
def ls_cmd(
    path: PathArgument,
    storage_type: StorageTypeOption,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    List the files and subfolders of a folder.

    Examples:
        Local: storage-io ls / --storage-type local --base-path /data
        S3: storage-io ls /reports/ --storage-type s3 --bucket my-bucket \
            --aws-profile myprofile
    """
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        folder = service.list_folder_contents(path)

        typer.echo(f"Folder: {folder.path}")
        for subfolder in folder.folders:
            typer.echo(f"  {subfolder.name}/")
        for file in folder.files:
            typer.echo(f"  {file.name} ({file.human_readable_size})")
        typer.echo(f"Folders: {len(folder.folders)}, Files: {len(folder.files)}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("stat")
def stat_cmd(
    path: PathArgument,
    storage_type: StorageTypeOption,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Show metadata of a file."""
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        meta = service.read_file_meta(path)

        typer.echo(f"Name: {meta.name}")
        typer.echo(f"Path: {meta.path}")
        typer.echo(f"Size: {meta.size:,} bytes")
        typer.echo(f"Human readable: {meta.human_readable_size}")
        if meta.creation_date:
            typer.echo(f"Created: {meta.creation_date.isoformat()}")
        if meta.modification_date:
            typer.echo(f"Modified: {meta.modification_date.isoformat()}")
        if meta.revision:
            typer.echo(f"Revision: {meta.revision}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("cat")
def cat_cmd(
    path: PathArgument,
    storage_type: StorageTypeOption,
    output: OutputOption = None,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Print a file's content, or save it with --output."""
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        if output:
            with open(output, "wb") as sink:
                service.read_file(path, sink)
        else:
            stdout = typer.get_binary_stream("stdout")
            service.read_file(path, stdout)
            stdout.flush()

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("put")
def put_cmd(
    path: PathArgument,
    source: Annotated[str, typer.Argument(help="Local file to upload")],
    storage_type: StorageTypeOption,
    revision: RevisionOption = None,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """
    Upload a local file, creating or overwriting the file at path.

    Examples:
        storage-io put /notes/today.txt ./today.txt --storage-type local \
            --base-path /data --revision 5d41402abc4b2a76b9719d911017c592
    """
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        with open(source, "rb") as data:
            meta = service.write_file(path, data, revision=revision)

        typer.echo(f"Written: {meta.path} ({meta.human_readable_size})")
        if meta.revision:
            typer.echo(f"Revision: {meta.revision}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("rm")
def rm_cmd(
    path: PathArgument,
    storage_type: StorageTypeOption,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Delete a file, or a folder with everything under it."""
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        service.delete(path)
        typer.echo(f"Deleted: {path}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("exists")
def exists_cmd(
    path: PathArgument,
    storage_type: StorageTypeOption,
    base_path: BasePathOption = None,
    bucket: BucketOption = None,
    prefix: PrefixOption = "",
    access_key_id: AccessKeyOption = None,
    secret_access_key: SecretKeyOption = None,
    session_token: SessionTokenOption = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: AwsProfileOption = None,
) -> None:
    """Check whether a file or folder exists (exit code 0 if it does, 2 if not)."""
    try:
        service = _open_service(
            _create_credentials(
                storage_type,
                base_path=base_path,
                bucket=bucket,
                prefix=prefix,
                access_key_id=access_key_id,
                secret_access_key=secret_access_key,
                session_token=session_token,
                region_name=region_name,
                endpoint_url=endpoint_url,
                aws_profile=aws_profile,
            )
        )
        found = service.exists(path)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    typer.echo(f"{path}: {'exists' if found else 'not found'}")
    if not found:
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
