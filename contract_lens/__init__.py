"""ContractLens: PDF contract risk analysis backed by a hosted LLM"""

__version__ = "0.1.0"
