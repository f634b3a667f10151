"""InputGuard models package.

Defines the result types shared by the validators and the HTTP layer:

  - result.py — Accepted / Rejected (SanitizationResult), RejectionKind,
                HostnameClassification, TemplateValidation
"""
