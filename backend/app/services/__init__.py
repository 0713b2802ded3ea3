"""
Services Layer

- tournament_registry, bracket_topology, third_place_matrix: static tournament
  data, validated at import
- bracket_engine, simulation_draft: pure prediction logic, no I/O
- simulation_service: saved simulations and votes (takes a Session)

Nothing here depends on HTTP request/response objects.
"""
