# Top-level package for arena-judge.

# This project implements:
# - HTML page -> node tree parsing
# - Battle turn discovery and classification
# - Response text cleaning and model name resolution
# - Judge prompt assembly and a diagnostic report
# - Optional LLM-generated titles, clipboard delivery, debounced re-scans

# Subpackages:
#     utils/       → Node model, structural rules, text cleaning, names, IO, watch, clipboard
#     models/      → LLM client, title generator, judge prompt template
#     evaluation/  → Turn classifier, prompt extraction, pipeline, diagnostics
#     experiments/ → Runner scripts

__version__ = "4.0.0"
