"""Core orchestration"""
from voice_shopper.core.pipeline import ItemPipeline, PipelineContext, PipelineOutcome, PipelineResult
from voice_shopper.core.orchestrator import ListMode, Notification, VoiceListOrchestrator

__all__ = [
    'ItemPipeline',
    'PipelineContext',
    'PipelineOutcome',
    'PipelineResult',
    'ListMode',
    'Notification',
    'VoiceListOrchestrator'
]
