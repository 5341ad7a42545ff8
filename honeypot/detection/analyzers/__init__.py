"""
Request analyzers.

Each module holds one leaf analyzer. ``DetectionPipeline.create_default``
registers them in the order they are listed here.
"""

from .base import Analyzer
from .sql_injection import SqlInjectionAnalyzer
from .xss import XssAnalyzer
from .path_traversal import PathTraversalAnalyzer
from .header_anomaly import HeaderAnomalyAnalyzer
from .ssrf import SsrfAnalyzer
from .http_verb import HttpVerbAnalyzer
from .user_agent import UserAgentAnalyzer
from .path_scanning import PathScanningAnalyzer
from .config_access import ConfigAccessAnalyzer
from .plugin_exploit import PluginExploitAnalyzer
from .brute_force import BruteForceAnalyzer
from .form_spam import FormSpamAnalyzer
from .xml_rpc import XmlRpcAnalyzer
from .credential_stuffing import CredentialStuffingAnalyzer
from .vulnerability_probe import VulnerabilityProbeAnalyzer
from .theme_exploit import ThemeExploitAnalyzer
from .user_enumeration import UserEnumerationAnalyzer
from .file_upload_malware import FileUploadMalwareAnalyzer
from .admin_directory_scanning import AdminDirectoryScanningAnalyzer
from .resource_exhaustion import ResourceExhaustionAnalyzer
from .wp_cron_abuse import WpCronAbuseAnalyzer
from .version_fingerprinting import VersionFingerprintingAnalyzer
from .database_backup_access import DatabaseBackupAccessAnalyzer
from .registration_honeypot import RegistrationHoneypotAnalyzer
from .search_spam import SearchSpamAnalyzer
from .trackback_pingback_spam import TrackbackPingbackSpamAnalyzer
from .media_library_abuse import MediaLibraryAbuseAnalyzer
from .wp_cli_abuse import WpCliAbuseAnalyzer
from .core_file_modification import CoreFileModificationAnalyzer
from .ajax_endpoint_abuse import AjaxEndpointAbuseAnalyzer
from .open_redirect import OpenRedirectAnalyzer
from .password_reset_abuse import PasswordResetAbuseAnalyzer
from .session_hijacking import SessionHijackingAnalyzer
from .unicode_encoding_attack import UnicodeEncodingAttackAnalyzer
from .rate_limit_bypass import RateLimitBypassAnalyzer
from .javascript_injection import JavaScriptInjectionAnalyzer

__all__ = [
    'Analyzer',
    'SqlInjectionAnalyzer',
    'XssAnalyzer',
    'PathTraversalAnalyzer',
    'HeaderAnomalyAnalyzer',
    'SsrfAnalyzer',
    'HttpVerbAnalyzer',
    'UserAgentAnalyzer',
    'PathScanningAnalyzer',
    'ConfigAccessAnalyzer',
    'PluginExploitAnalyzer',
    'BruteForceAnalyzer',
    'FormSpamAnalyzer',
    'XmlRpcAnalyzer',
    'CredentialStuffingAnalyzer',
    'VulnerabilityProbeAnalyzer',
    'ThemeExploitAnalyzer',
    'UserEnumerationAnalyzer',
    'FileUploadMalwareAnalyzer',
    'AdminDirectoryScanningAnalyzer',
    'ResourceExhaustionAnalyzer',
    'WpCronAbuseAnalyzer',
    'VersionFingerprintingAnalyzer',
    'DatabaseBackupAccessAnalyzer',
    'RegistrationHoneypotAnalyzer',
    'SearchSpamAnalyzer',
    'TrackbackPingbackSpamAnalyzer',
    'MediaLibraryAbuseAnalyzer',
    'WpCliAbuseAnalyzer',
    'CoreFileModificationAnalyzer',
    'AjaxEndpointAbuseAnalyzer',
    'OpenRedirectAnalyzer',
    'PasswordResetAbuseAnalyzer',
    'SessionHijackingAnalyzer',
    'UnicodeEncodingAttackAnalyzer',
    'RateLimitBypassAnalyzer',
    'JavaScriptInjectionAnalyzer',
]
