"""
DesertWatch — multi-agent briefing on hospital infrastructure gaps in Ghana.

A sequential LangGraph workflow of hosted-model calls:
  1. Discovery   web-grounded search for recent facility reports
  2. Parser      free text → structured capabilities
  3. Verifier    cross-check claims against text + web
  4. Predictor   forecast where medical deserts widen
  5. Strategist  12-month regional resource plan
plus a Matcher → Strategist intervention protocol per facility and a free-form
query agent. Results are served as map, knowledge grid, audit and document views.
"""
