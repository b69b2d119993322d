"""Task names the plugin registers: the public surface for build descriptions."""

from __future__ import annotations

VERIFY_VERSION_CONTROL = "verifyVersionControl"
VERIFY_BUILD_SERVER = "verifyBuildServer"
VERIFY_NO_STAGE_URL = "verifyNoStageUrl"

GENERATE_PROJECT_CHANGELOG = "generateProjectChangeLog"
GENERATE_GENERIC_CHANGELOG = "generateGenericChangeLog"

INCREASE_MAJOR_VERSION = "increaseMajorVersionName"
INCREASE_MINOR_VERSION = "increaseMinorVersionName"
INCREASE_BUILD_VERSION = "increaseBuildVersionName"

GET_FLAVORS = "getFlavors"

TAG_PROJECT = "tagProject"

VERIFIERS = (VERIFY_VERSION_CONTROL, VERIFY_BUILD_SERVER, VERIFY_NO_STAGE_URL)

# Host task names the rules react to
RELEASE_BUILD_CONFIG_PREFIX = "generate"
RELEASE_BUILD_CONFIG_SUFFIX = "ReleaseBuildConfig"
PRE_DEV_RELEASE_BUILD = "preDevReleaseBuild"
