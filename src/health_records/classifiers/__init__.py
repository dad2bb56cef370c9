from .document_classifier import DocumentClassifier, classify, KEYWORD_RULES
