"""Infrastructure layer: tokenizer and summarizer adapters, compression engine."""
