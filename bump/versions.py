"""Version parsing, bumping and resolution.

Versions are plain ``MAJOR.MINOR.PATCH`` semver values. Pre-release and
build metadata suffixes are rejected outright rather than dropped, since
bumping ``1.0.0-alpha`` has no single right answer.
"""

from __future__ import annotations

import logging

import semver

from .errors import BumpError, ErrorKind
from .models import BumpPlan, BumpType

logger = logging.getLogger(__name__)

# Version `cargo new` writes; treated as "never set" when tags exist.
DEFAULT_VERSION = semver.Version(0, 1, 0)


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    A single leading "v" is accepted so tags can be parsed directly:
    - "1.2.3" → 1.2.3
    - "v1.2.3" → 1.2.3

    Raises:
        BumpError: PRE_RELEASE, BUILD_METADATA, or MALFORMED.
    """
    text = version_str.strip()
    if text.startswith("v"):
        text = text[1:]
    try:
        version = semver.Version.parse(text)
    except (ValueError, TypeError) as exc:
        raise BumpError(
            ErrorKind.MALFORMED, f"Invalid version {version_str!r}: {exc}"
        ) from exc

    if version.prerelease:
        raise BumpError(
            ErrorKind.PRE_RELEASE,
            f"Pre-release versions are not supported: {version_str}",
        )
    if version.build:
        raise BumpError(
            ErrorKind.BUILD_METADATA,
            f"Build metadata versions are not supported: {version_str}",
        )
    return version


def bump_version(version: semver.Version, bump_type: BumpType) -> semver.Version:
    """Return the next version for the given bump type.

    Examples:
        1.2.3, patch → 1.2.4
        1.2.9, patch → 1.2.10
        1.2.3, minor → 1.3.0
        1.2.3, major → 2.0.0
    """
    if bump_type is BumpType.MAJOR:
        return version.bump_major()
    if bump_type is BumpType.MINOR:
        return version.bump_minor()
    return version.bump_patch()


def format_tag(version: semver.Version) -> str:
    """Format a version as a git tag (with 'v' prefix)."""
    return f"v{version.major}.{version.minor}.{version.patch}"


def resolve_current(
    manifest_version: semver.Version,
    latest_tag: str | None,
    manifest_tag_exists: bool,
) -> semver.Version:
    """Decide which version the bump starts from.

    The manifest wins, except:
    1. It still holds the ``cargo new`` default (0.1.0) while a tag series
       exists: the manifest was never maintained, so the latest tag wins.
    2. The manifest's own tag already exists and a newer tag is present:
       the manifest is stale, so the latest tag wins.

    Args:
        manifest_version: Version read from Cargo.toml.
        latest_tag: Highest ``v*`` tag, or None if there are none.
        manifest_tag_exists: Whether ``v{manifest_version}`` is a tag.
    """
    if latest_tag is None:
        return manifest_version

    if manifest_version == DEFAULT_VERSION:
        logger.info(
            "Manifest holds default %s; using latest tag %s",
            DEFAULT_VERSION,
            latest_tag,
        )
        return parse_version(latest_tag)
    if not manifest_tag_exists:
        return manifest_version

    tag_version = parse_version(latest_tag)
    if tag_version > manifest_version:
        logger.info(
            "Manifest %s is already tagged and behind %s; using the tag",
            manifest_version,
            latest_tag,
        )
        return tag_version
    return manifest_version


def plan_bump(
    manifest_version: str | None,
    latest_tag: str | None,
    manifest_tag_exists: bool,
    bump_type: BumpType,
) -> BumpPlan:
    """Work out the version transition for a directory.

    Args:
        manifest_version: Raw version string from Cargo.toml, or None when
                          the field is missing.
        latest_tag: Highest ``v*`` tag, or None.
        manifest_tag_exists: Whether the tag for the manifest version exists.
        bump_type: Which component to increment.

    Returns:
        The plan. When neither the manifest nor any tag holds a version,
        this is an initial release of 0.1.0 with nothing to bump from.
    """
    if manifest_version is not None:
        current = resolve_current(
            parse_version(manifest_version), latest_tag, manifest_tag_exists
        )
        return BumpPlan(current=current, target=bump_version(current, bump_type))

    # ManifestVersionMissing is recovered: the field is written with the target
    logger.info("%s: no version field in manifest", ErrorKind.MANIFEST_VERSION_MISSING.value)
    if latest_tag is not None:
        current = parse_version(latest_tag)
        return BumpPlan(current=current, target=bump_version(current, bump_type))

    logger.info("No version found anywhere; starting at %s", DEFAULT_VERSION)
    return BumpPlan(current=None, target=DEFAULT_VERSION)
