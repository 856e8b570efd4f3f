"""
OpenAI async image package.

Provides:
- OpenAIAsyncImage component with a cancellable load lifecycle (view/)
- httpx loader for the OpenAI Images API and pluggable image decoders (loader/)
- FastAPI preview service and a command-line generator
"""
