from parlor.tests.mocks.ledger import BrokenLedger, RefusingLedger
from parlor.tests.mocks.renderer import RecordingRenderer

__all__ = ["BrokenLedger", "RecordingRenderer", "RefusingLedger"]
