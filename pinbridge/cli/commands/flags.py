"""
Flags command: print the flags a downstream build needs to use the bridge.
"""

import shlex

from pinbridge.build.manifest import BuildManifest
from pinbridge.cli.utils import print_error
from pinbridge.core.environment import BuildEnvironment
from pinbridge.core.exceptions import ConfigurationError


def run(args) -> int:
    try:
        env = BuildEnvironment.from_env()
        manifest = BuildManifest.read(env.out_dir)
    except ConfigurationError as e:
        print_error(str(e))
        return 1

    config = manifest.configuration
    cflags = config.compile_args()

    # Static archives are linked by path, shared libraries by name.
    artifact = manifest.artifact
    if artifact.suffix == ".a":
        libs = [str(artifact)]
    else:
        libs = [f"-L{artifact.parent}", f"-l{artifact.stem[len('lib'):]}"]
    libs += config.link_flags

    if args.cflags:
        parts = cflags
    elif args.libs:
        parts = libs
    else:
        parts = cflags + libs

    print(" ".join(shlex.quote(p) for p in parts))
    return 0
