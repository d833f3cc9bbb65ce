"""
Repository evaluators: popularity, contributors, maintenance activity,
metadata and license.

All five read the single `repository` bundle (RepositoryStats).
"""

from __future__ import annotations

from nilo_trust.analysis_engine.evaluators import (
    STRICT_PASS_RATIO,
    Evaluator,
    ScoreSheet,
)
from nilo_trust.analysis_engine.signals import BUNDLE_REPOSITORY, RepositoryStats

SECONDS_PER_DAY = 86400.0

STAR_BANDS = ((1000, 10), (100, 8), (30, 6), (5, 3))
CONTRIBUTOR_BANDS = ((10, 10), (3, 7), (2, 4), (1, 1))
# (max days since last update, points)
FRESHNESS_BANDS = ((14, 10), (30, 8), (90, 5), (365, 2))
OPEN_ISSUES_LIMIT = 50
OPEN_ISSUES_PENALTY = 2
PLACEHOLDER_DESCRIPTION = "No description provided"

LICENSE_OSI = 10
LICENSE_OTHER = 5
OSI_LICENSES = frozenset(
    {
        "MIT",
        "Apache-2.0",
        "GPL-2.0",
        "GPL-3.0",
        "LGPL-2.1",
        "LGPL-3.0",
        "BSD-2-Clause",
        "BSD-3-Clause",
        "MPL-2.0",
        "ISC",
        "AGPL-3.0",
        "EPL-2.0",
        "Unlicense",
        "Zlib",
    }
)
_OSI_LOOKUP = {spdx.lower(): spdx for spdx in OSI_LICENSES}


def _osi_id(license_id: str) -> str | None:
    """Match an SPDX id case-insensitively, tolerating -only / -or-later suffixes."""
    key = license_id.strip().lower()
    for suffix in ("-only", "-or-later", "+"):
        if key.endswith(suffix):
            key = key[: -len(suffix)]
            break
    return _OSI_LOOKUP.get(key)


def score_popularity(sheet: ScoreSheet, repo: RepositoryStats, observed_at: float) -> None:
    for threshold, points in STAR_BANDS:
        if repo.stars >= threshold:
            sheet.award(points, f"{repo.stars} stars")
            return
    sheet.flag(f"Low star count ({repo.stars})")


def score_contributors(sheet: ScoreSheet, repo: RepositoryStats, observed_at: float) -> None:
    count = repo.contributors
    if count <= 0:
        sheet.flag("No contributor data available")
        return
    for threshold, points in CONTRIBUTOR_BANDS:
        if count >= threshold:
            sheet.award(points, f"{count} contributors")
            break
    if count == 1:
        sheet.flag("Single contributor")


def score_activity(sheet: ScoreSheet, repo: RepositoryStats, observed_at: float) -> None:
    if repo.updated_at is None:
        sheet.flag("Last update time unknown")
    else:
        days = max(0, int((observed_at - repo.updated_at) // SECONDS_PER_DAY))
        for max_days, points in FRESHNESS_BANDS:
            if days <= max_days:
                sheet.award(points, f"Updated {days} days ago")
                break
        if days > 90:
            sheet.flag(f"Not updated recently ({days} days ago)")

    if repo.open_issues > OPEN_ISSUES_LIMIT:
        sheet.deduct(OPEN_ISSUES_PENALTY)
        sheet.flag(f"High number of open issues ({repo.open_issues})")


def score_metadata(sheet: ScoreSheet, repo: RepositoryStats, observed_at: float) -> None:
    if repo.description and repo.description != PLACEHOLDER_DESCRIPTION:
        sheet.award(5, "Has description")
    else:
        sheet.flag("No description provided")


def score_license(sheet: ScoreSheet, repo: RepositoryStats, observed_at: float) -> None:
    if not repo.license or repo.license.upper() == "NOASSERTION":
        sheet.flag("No license file", critical=True)
        return
    spdx = _osi_id(repo.license)
    if spdx:
        sheet.award(LICENSE_OSI, f"OSI-approved license ({spdx})")
    else:
        sheet.award(LICENSE_OTHER, f"License: {repo.license}")
        sheet.flag(f"Non-OSI license ({repo.license})")


REPO_POPULARITY = Evaluator(
    name="popularity",
    requires=BUNDLE_REPOSITORY,
    max_score=10,
    score_fn=score_popularity,
    payload_type=RepositoryStats,
    missing_flag="No repository data",
    description="Star count",
)

REPO_CONTRIBUTORS = Evaluator(
    name="contributors",
    requires=BUNDLE_REPOSITORY,
    max_score=10,
    score_fn=score_contributors,
    payload_type=RepositoryStats,
    missing_flag="No contributor data",
    description="Number of distinct contributors",
)

REPO_ACTIVITY = Evaluator(
    name="maintenance",
    requires=BUNDLE_REPOSITORY,
    max_score=10,
    score_fn=score_activity,
    payload_type=RepositoryStats,
    missing_flag="Maintenance activity unknown",
    description="Days since last update and open issue backlog",
)

REPO_METADATA = Evaluator(
    name="repository_metadata",
    requires=BUNDLE_REPOSITORY,
    max_score=5,
    score_fn=score_metadata,
    payload_type=RepositoryStats,
    missing_flag="No repository metadata",
    description="Presence of a meaningful description",
)

REPO_LICENSE = Evaluator(
    name="license",
    requires=BUNDLE_REPOSITORY,
    max_score=10,
    score_fn=score_license,
    payload_type=RepositoryStats,
    pass_ratio=STRICT_PASS_RATIO,
    missing_flag="License status unknown",
    description="OSI-approved license present",
)

REPOSITORY_EVALUATORS = (
    REPO_POPULARITY,
    REPO_CONTRIBUTORS,
    REPO_ACTIVITY,
    REPO_METADATA,
    REPO_LICENSE,
)
