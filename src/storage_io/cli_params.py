"""Shared CLI parameter definitions.

Every command takes the same backend options; defining them once keeps
names, types and help text consistent across commands.

Usage:
    @app.command()
    def my_command(
        path: PathArgument,
        storage_type: StorageTypeOption,
        base_path: BasePathOption = None,
    ):
        pass
"""

from typing import Annotated, Literal, Optional

import typer

StorageType = Literal["local", "s3"]

PathArgument = Annotated[
    str, typer.Argument(help="Storage path, absolute (folders end with '/')")
]

StorageTypeOption = Annotated[
    StorageType,
    typer.Option(
        "--storage-type",
        "-t",
        help="Storage type: local or s3",
        case_sensitive=False,
    ),
]

# Local options
BasePathOption = Annotated[
    Optional[str],
    typer.Option("--base-path", help="Directory used as storage root (for local)"),
]

# S3 options
BucketOption = Annotated[
    Optional[str], typer.Option("--bucket", help="S3 bucket name (for S3)")
]
PrefixOption = Annotated[
    str, typer.Option("--prefix", help="Key prefix used as storage root (for S3)")
]
AccessKeyOption = Annotated[
    Optional[str],
    typer.Option("--access-key-id", help="AWS access key ID (for S3)"),
]
SecretKeyOption = Annotated[
    Optional[str],
    typer.Option("--secret-access-key", help="AWS secret access key (for S3)"),
]
SessionTokenOption = Annotated[
    Optional[str],
    typer.Option("--session-token", help="AWS session token (for S3)"),
]
RegionOption = Annotated[
    Optional[str], typer.Option("--region", help="AWS region name (for S3)")
]
EndpointUrlOption = Annotated[
    Optional[str], typer.Option("--endpoint-url", help="Custom S3 endpoint URL")
]
AwsProfileOption = Annotated[
    Optional[str],
    typer.Option("--aws-profile", help="AWS CLI profile name (for S3)"),
]

# Operation options
RevisionOption = Annotated[
    Optional[str],
    typer.Option(
        "--revision", help="Only overwrite if the file is still at this revision"
    ),
]
OutputOption = Annotated[
    Optional[str],
    typer.Option("--output", "-o", help="Write content to this file instead of stdout"),
]
