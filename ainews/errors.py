"""
Pipeline error taxonomy

Only PersistenceUnavailable is allowed to abort a run. The others are caught
at the item or source boundary and turned into counters.
"""


class PipelineError(Exception):
    """Base class for ingestion and translation failures"""


class SourceUnavailable(PipelineError):
    """Feed, listing or API could not be fetched or parsed"""

    def __init__(self, source_name: str, reason: str):
        self.source_name = source_name
        self.reason = reason
        super().__init__(f"{source_name}: {reason}")


class ExtractionFailed(PipelineError):
    """No usable article body could be extracted from a page"""


class TranslationFailed(PipelineError):
    """Translation call errored or returned unusable output"""


class PersistenceUnavailable(PipelineError):
    """The database cannot be reached; the current run must stop"""
