"""
Use Cases

Organized into domain folders:
- security/: Security event store, reports and pattern analysis
- api_keys/: API key management and usage
- mfa/: Second-factor devices and verification
- encryption_keys/: Tenant data keys
- diagnostics/: On-demand security self checks

Import from subdirectories.
"""
