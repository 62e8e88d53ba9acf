"""Build task modules live here.

Each module holds one asset class and decorates its entry points with
`@orchestrator.task(name=..., feature=...)`; the pipeline discovers them by
import. Keep converters stateless: everything they need comes from the
`BuildConfig` they receive.
"""
