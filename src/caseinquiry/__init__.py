"""Case Inquiry: upload a case document and question it through a remote analysis service."""

from caseinquiry.session import InquirySession, SessionState

__all__ = ["InquirySession", "SessionState"]
__version__ = "0.1.0"
