"""
Analytics Agent Components

- ActionScriptInterpreter: parses and replays action scripts
- RequestCaptureBuffer: decodes and filters intercepted analytics hits
- ReconciliationEngine: turns captures into Pass/Fail verdicts
- ResultSink: sheet write-back and audit persistence
"""

from .interpreter import ActionScriptInterpreter
from .capture import RequestCaptureBuffer, generate_request_id
from .reconciler import ReconciliationEngine, normalize
from .sink import ResultSink

__all__ = [
    'ActionScriptInterpreter',
    'RequestCaptureBuffer',
    'generate_request_id',
    'ReconciliationEngine',
    'normalize',
    'ResultSink'
]
