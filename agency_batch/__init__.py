"""
agency_batch -- Bulk task allocation.

Turns a package line item ("30 posters between the 1st and the 31st") into
one task per production unit:

    calendar        working days in a range (Sundays and holidays excluded)
    redistribution  moves a holiday's quota onto neighbouring working days
    plan            validates a line-item config and derives its day plan
    entries         expands a plan into numbered task payloads
    queue           session-scoped staging area, one config per line item
    committer       persists every queued plan sequentially with progress

Architecture:
    agency_batch/domain is pure (ZERO I/O).  agency_batch/services talks to
    the document store through agency_services.store.DocumentStore.

Invariants:
    - Redistribution only moves units, it never creates or destroys them.
    - A date-range config is accepted only when its quantity divides the
      working-day count into a positive whole number per day.
    - Commit re-derives every plan; nothing computed at enqueue time is reused.
    - Writes are sequential; a failure leaves the already-written prefix.
"""
