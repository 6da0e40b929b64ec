import re
from dataclasses import dataclass, field
from enum import Enum

from release_contributors.models.release import (
    Contributor,
    PullRequest,
    Release,
    avatar_url_for,
    display_name_for,
)


class SectionState(Enum):
    OUTSIDE_SECTION = "outside-section"
    INSIDE_SECTION = "inside-section"


@dataclass
class _ContributorBuilder:
    name: str
    github_user: str
    prs: list[PullRequest] = field(default_factory=list)

    def build(self) -> Contributor:
        return Contributor(
            name=self.name,
            github_user=self.github_user,
            avatar_url=avatar_url_for(self.github_user),
            prs=tuple(self.prs),
        )


class ReleaseNotesParser:
    """Parser for the "Pull requests" credits section of a release notes document.

    The section looks like::

        ### Pull Requests

        Contributions to `vscode`:

        * [@alice (Alice A.)](https://github.com/alice): Fix X [PR #42](https://github.com/microsoft/vscode/pull/42)
          * Follow-up [PR #43](https://github.com/microsoft/vscode/pull/43)

        ## Thank you

    The format is not guaranteed, so anything unrecognised is skipped rather
    than treated as an error.
    """

    SECTION_START = "### Pull Requests"
    SECTION_END = "## "

    # * [@username (Display Name)](https://github.com/username)...
    CONTRIBUTOR_LINE = re.compile(r"^\* \[@([^\]]+)\]\(https://github\.com/([^)]+)\)(.*)$")
    # Indented follow-up items belonging to the previous contributor
    SUB_ITEM = re.compile(r"^\s+\* (.+)$")
    # [PR #123](https://github.com/org/repo/pull/123)
    PR_LINK = re.compile(r"\[PR #(\d+)\]\((https://github\.com/([^)]+)/pull/\d+)\)")
    # Contributions to `repo`:
    REPO_SECTION = re.compile(r"^Contributions to `([^`]+)`:?$")

    def parse(self, version: str, content: str) -> Release:
        contributors: list[_ContributorBuilder] = []
        current: _ContributorBuilder | None = None
        state = SectionState.OUTSIDE_SECTION

        for raw_line in (content or "").split("\n"):
            line = raw_line.rstrip("\r")

            if state is SectionState.OUTSIDE_SECTION:
                if line.startswith(self.SECTION_START):
                    state = SectionState.INSIDE_SECTION
                continue

            if line.startswith(self.SECTION_END):
                break

            if self.REPO_SECTION.match(line):
                current = None
                continue

            contributor_match = self.CONTRIBUTOR_LINE.match(line)
            if contributor_match:
                link_text, github_user, rest = contributor_match.groups()
                github_user = github_user.strip("/")
                current = _ContributorBuilder(
                    name=self._display_name(link_text, github_user),
                    github_user=github_user,
                    prs=self._extract_prs(rest),
                )
                contributors.append(current)
                continue

            if current is not None:
                sub_item_match = self.SUB_ITEM.match(line)
                if sub_item_match:
                    current.prs.extend(self._extract_prs(sub_item_match.group(1)))

        return Release(
            version=version,
            display_name=display_name_for(version),
            contributors=tuple(builder.build() for builder in contributors),
        )

    def _display_name(self, link_text: str, github_user: str) -> str:
        """Name in parentheses after the handle, falling back to the handle."""
        _, sep, name = link_text.partition(" (")
        if not sep:
            return github_user
        return name.removesuffix(")").strip() or github_user

    def _extract_prs(self, text: str) -> list[PullRequest]:
        prs: list[PullRequest] = []
        previous_end = 0
        previous_title = ""
        for match in self.PR_LINK.finditer(text):
            title = self._description(text[previous_end : match.start()])
            # "Fix X [PR #1](...), [PR #2](...)" credits both PRs to "Fix X"
            if not re.search(r"\w", title):
                title = previous_title
            number, url, repo_path = match.groups()
            prs.append(
                PullRequest(
                    title=title,
                    url=url,
                    repo=repo_path.rsplit("/", 1)[-1],
                    number=number,
                )
            )
            previous_end = match.end()
            previous_title = title
        return prs

    @staticmethod
    def _description(segment: str) -> str:
        desc = segment.strip().lstrip(",;").strip()
        desc = desc.removeprefix(": ").removeprefix(":")
        return desc.strip()
