from release_contributors.parsing.release_notes_parser import ReleaseNotesParser, SectionState

__all__ = ["ReleaseNotesParser", "SectionState"]
