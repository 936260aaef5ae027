"""Chaves canônicas dos artifacts trocados entre estágios via `ResolutionContext`."""

DOCUMENT = "manifest.document"
HYDRATED = "manifest.hydrated"
MANIFEST = "manifest.model"
REFS = "manifest.refs"
REFERENCES = "manifest.references"
SUPPRESSIONS = "governance.suppressions"
CONFIGS = "config.resolved"
CAPABILITIES = "binding.capabilities"
BINDING = "binding.report"
GOVERNANCE = "governance.report"
PLAN = "plan.resolved"
