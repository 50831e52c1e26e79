"""
package.json generation for an extracted bundle.

Modules resolved under ``node_modules/`` are not extracted; they become
dependencies pinned to the registry's latest version instead.
"""
import asyncio
import json
from typing import Dict, Optional

import requests
from pydantic import BaseModel, Field

from .config import REGISTRY_URL
from .diagnostics import debug_log
from .errors import VersionLookupError

TEST_SCRIPT = "node -e \"require('.')\""


class PackageDescriptor(BaseModel):
    """The package.json written next to the extracted modules."""
    name: str
    main: str
    browser: str
    scripts: Dict[str, str] = Field(default_factory=lambda: {"test": TEST_SCRIPT})
    devDependencies: Dict[str, str] = Field(default_factory=lambda: {"unbrowserify": "UnifyMe/unbrowserify"})
    dependencies: Optional[Dict[str, str]] = None


def latest_version(name, registry_url=REGISTRY_URL, timeout=30.0):
    """Ask the registry for the ``latest`` dist-tag of a package."""
    url = f"{registry_url.rstrip('/')}/{name}"
    debug_log(f"GET {url}")
    try:
        resp = requests.get(url, timeout=timeout)
        resp.raise_for_status()
        payload = resp.json()
    except requests.exceptions.Timeout:
        raise VersionLookupError(
            f"Registry request for {name} timed out ({timeout}s)",
            suggestion="Check your network, or pass --no-package to skip package.json",
        )
    except requests.exceptions.ConnectionError:
        raise VersionLookupError(
            f"Failed to connect to the registry at {registry_url}",
            suggestion="Check your network, or pass --registry with a reachable mirror",
        )
    except requests.exceptions.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 404:
            raise VersionLookupError(
                f"Package {name} is not published on {registry_url}",
                suggestion="It may be a vendored copy; rename its directory or pass --no-package",
            )
        raise VersionLookupError(f"Registry error ({status}) for package {name}")
    except ValueError:
        raise VersionLookupError(f"Registry returned a malformed document for {name}")

    version = payload.get("dist-tags", {}).get("latest") if isinstance(payload, dict) else None
    if not isinstance(version, str):
        raise VersionLookupError(f"Registry document for {name} has no latest version")
    return version


async def latest_version_async(name, registry_url, timeout):
    """Async wrapper for concurrent lookups."""
    return await asyncio.to_thread(latest_version, name, registry_url, timeout)


def resolve_dependency_versions(names, registry_url=REGISTRY_URL, timeout=30.0):
    """
    Look every package up concurrently and return ``{name: "^version"}``
    sorted by name. The first failed lookup is raised.
    """
    names = sorted(set(names))
    if not names:
        return {}

    async def gather_versions():
        tasks = [latest_version_async(name, registry_url, timeout) for name in names]
        return await asyncio.gather(*tasks)

    versions = asyncio.run(gather_versions())
    return {name: f"^{version}" for name, version in zip(names, versions)}


def build_descriptor(name, entry_paths, dependencies=None):
    """Descriptor for a bundle whose seeded entry modules were written to ``entry_paths``."""
    main = entry_paths[0]
    browser = entry_paths[1] if len(entry_paths) > 1 else main
    return PackageDescriptor(name=name, main=main, browser=browser, dependencies=dependencies or None)


def write_package_json(descriptor, path):
    data = descriptor.model_dump(exclude_none=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
        f.write('\n')
    return path
