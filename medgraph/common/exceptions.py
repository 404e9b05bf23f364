class MedGraphError(Exception):
    """
    Base class for all errors raised by medgraph.
    """


class InvalidInputError(MedGraphError, ValueError):
    """
    Structurally invalid caller input: a fragment that is not a mapping,
    an empty search query, an unknown entity kind or a malformed image.
    """


class ScanError(MedGraphError):
    """
    The vision boundary could not turn an image into a graph fragment.
    """


class NotAMedicationError(ScanError):
    """
    The model reported that the scanned image does not show a medication.
    """
