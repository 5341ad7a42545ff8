"""
Rule tables shared by the detection analyzers.

Every table is an immutable, ordered, duplicate-free tuple built once at
import time. Regex tables carry their flags inline so each rule source is
self-describing; they are compiled and complexity-checked on import, so a
broken rule fails the process at startup instead of on a live request.

Ordering is deterministic but carries no priority.
"""

import logging
import re
from types import MappingProxyType
from typing import Mapping, Tuple

from .pattern_engine import compile_rules

logger = logging.getLogger(__name__)


_SQL_INJECTION = (
    # UNION-based injection
    r"(?i)union\s+(all\s+)?select",
    r"(?i)union\s+(all\s+)?select\s.{0,256}?from",

    # Boolean-based blind injection
    r"(?i)\bor\b\s+\d+=\d+",
    r"(?i)\band\b\s+\d+=\d+",
    r"(?i)\bor\b\s+'[^']*'\s*=\s*'[^']*'",
    r"(?i)\band\b\s+'[^']*'\s*=\s*'[^']*'",
    r'(?i)\bor\b\s+"[^"]*"\s*=\s*"[^"]*"',

    # Time-based blind injection
    r"(?i)sleep\s*\(\s*\d+",
    r"(?i)benchmark\s*\(\s*\d+",
    r"(?i)waitfor\s+delay\s",
    r"(?i)pg_sleep\s*\(",

    # Stacked queries
    r"(?i);\s*(drop|insert|update|delete|alter|create|truncate)\s",

    # Comment-based injection
    r"(?s)/\*.{0,256}?\*/",
    r"(?m)--\s*$",

    # Error-based injection
    r"(?i)\bhaving\b\s+\d",
    r"(?i)\bgroup\s+by\b\s+\d",
    r"(?i)\border\s+by\b\s+\d{2,}",
    r"(?i)extractvalue\s*\(",
    r"(?i)updatexml\s*\(",

    # Blind SQLi functions
    r"(?i)\bif\s*\(\s*\(",
    r"(?i)\bcase\s+when\b",
    r"(?i)\bsubstring\s*\(",
    r"(?i)\bascii\s*\(\s*substr",
    r"(?i)\bchar\s*\(\s*\d+",
    r"(?i)\bconcat\s*\(",
    r"(?i)\bconcat_ws\s*\(",
    r"(?i)\bgroup_concat\s*\(",

    # Encoded quote / semicolon variants
    r"(?i)%27.{0,256}?(union|select|or|and|drop|insert|update|delete)",
    r"(?i)%22.{0,256}?(union|select|or|and|drop|insert|update|delete)",
    r"(?i)%3b\s*(drop|insert|update|delete)",

    # Double encoded variants
    r"(?i)%2527",
    r"(?i)%2522",
    r"(?i)%253b",

    # Information schema probing
    r"(?i)information_schema\.",
    r"(?i)table_name",
    r"(?i)column_name",

    # Database file functions
    r"(?i)load_file\s*\(",
    r"(?i)into\s+(out|dump)file",
    r"(?i)0x[0-9a-f]{8,}",
)

_XSS = (
    # Script tags
    r"(?i)<\s*script[\s>]",
    r"(?i)<\s*/\s*script\s*>",

    # Event handlers
    r"""(?i)\bon\w+\s*=\s*["']?[^"']{0,256}?(?:alert|confirm|prompt|eval|function|javascript)""",
    r"(?i)\bonerror\s*=",
    r"(?i)\bonload\s*=",
    r"(?i)\bonmouseover\s*=",
    r"(?i)\bonfocus\s*=",
    r"(?i)\bonclick\s*=",
    r"(?i)\bonchange\s*=",
    r"(?i)\bonsubmit\s*=",
    r"(?i)\bonmouseout\s*=",
    r"(?i)\bonkeyup\s*=",
    r"(?i)\bonkeydown\s*=",

    # JavaScript protocol
    r"(?i)javascript\s*:",

    # Data URIs
    r"(?i)data\s*:\s*text/html",
    r"(?i)data\s*:\s*[^;]{0,256};base64",

    # SVG
    r"(?is)<\s*svg[\s/].{0,256}?on\w{1,32}\s*=",
    r"(?i)<\s*svg\s",

    # IMG
    r"(?i)<\s*img[^>]{1,256}on\w{1,32}\s*=",
    r"""(?i)<\s*img[^>]{1,256}src\s*=\s*["']?\s*x""",

    # Iframe
    r"(?i)<\s*iframe",

    # Expression / eval constructs
    r"(?i)expression\s*\(",
    r"(?i)\beval\s*\(",
    r"(?i)\bFunction\s*\(",
    r"""(?i)\bsetTimeout\s*\(\s*["'/]""",
    r"""(?i)\bsetInterval\s*\(\s*["'/]""",

    # Template injection
    r"(?s)\{\{(?!\{).{0,256}?\}\}",
    r"\$\{(?!\$\{)[^}]{0,256}\}",

    # Object / embed / applet
    r"(?i)<\s*object[\s>]",
    r"(?i)<\s*embed[\s>]",
    r"(?i)<\s*applet[\s>]",

    # Entity-encoded script
    r"(?i)&#x0*3[cC];?\s*script",
    r"(?i)&#0*60;?\s*script",

    # URL-encoded tags
    r"(?i)%3[cC]script",
    r"(?i)%3[cC]svg",
    r"(?i)%3[cC]img",

    # DOM access
    r"(?i)document\s*\.\s*(cookie|domain|location|write)",
    r"(?i)window\s*\.\s*location",

    # Network calls
    r"(?i)\bnew\s+XMLHttpRequest",
    r"""(?i)\bfetch\s*\(\s*["']http""",
)

_PATH_TRAVERSAL = (
    # Directory traversal
    r"\.\./",
    r"\.\.\\",

    # URL-encoded traversal
    r"(?i)%2e%2e%2f",
    r"(?i)%2e%2e/",
    r"(?i)\.\.%2f",
    r"(?i)%2e%2e%5c",

    # Double URL-encoded traversal
    r"(?i)%252e%252e%252f",
    r"(?i)%252e%252e%255c",

    # Null byte
    r"(?i)%00",

    # Unix files
    r"(?i)/etc/passwd",
    r"(?i)/etc/shadow",
    r"(?i)/proc/self/environ",
    r"(?i)/proc/self/fd",
    r"(?i)/proc/self/cmdline",

    # Windows paths
    r"(?i)[a-zA-Z]:\\",
    r"(?i)\\windows\\system32",
    r"(?i)\\winnt\\",
    r"(?i)\\boot\.ini",

    # PHP stream wrappers
    r"(?i)php://filter",
    r"(?i)php://input",
    r"(?i)expect://",
    r"(?i)zip://",
    r"(?i)phar://",
    r"(?i)compress\.zlib://",

    # Data wrapper
    r"(?i)data://text/plain",
)

_SSRF = (
    # Loopback
    r"(?i)127\.0\.0\.\d+",
    r"(?i)localhost",
    r"(?i)0\.0\.0\.0",
    r"\[?::1\]?",

    # RFC 1918
    r"10\.\d{1,3}\.\d{1,3}\.\d{1,3}",
    r"192\.168\.\d{1,3}\.\d{1,3}",
    r"172\.(1[6-9]|2\d|3[01])\.\d{1,3}\.\d{1,3}",

    # Link-local
    r"169\.254\.\d{1,3}\.\d{1,3}",

    # Cloud metadata
    r"169\.254\.169\.254",
    r"(?i)metadata\.google\.internal",
    r"(?i)metadata\.aws\.internal",
    r"100\.100\.100\.200",

    # Dangerous schemes
    r"(?i)file://",
    r"(?i)dict://",
    r"(?i)gopher://",
    r"(?i)sftp://",
    r"(?i)ldap://",
    r"(?i)tftp://",

    # URL-carrying parameters
    r"(?i)[?&](url|redirect|next|target|dest|return|goto|link|proxy|site|path)\s*=\s*https?://",
    r"(?i)[?&](url|redirect|next|target|dest|return|goto|link|proxy|site|path)\s*=\s*(file|dict|gopher|ldap)://",

    # Hex / octal IP encodings
    r"(?i)0x[0-9a-f]{8}",
    r"(?i)0[0-7]{9,}",

    # Short localhost forms
    r"(?i)http://0/",
    r"(?i)http://0x7f",
)

_SUSPICIOUS_USER_AGENTS = (
    # SQL injection tools
    r"(?i)sqlmap",
    r"(?i)havij",

    # Web vulnerability scanners
    r"(?i)nikto",
    r"(?i)nessus",
    r"(?i)openvas",
    r"(?i)acunetix",
    r"(?i)qualys",
    r"(?i)w3af",
    r"(?i)skipfish",
    r"(?i)arachni",
    r"(?i)vega/",
    r"(?i)appscan",
    r"(?i)webscarab",
    r"(?i)paros",
    r"(?i)owasp",

    # Network scanners
    r"(?i)nmap",
    r"(?i)masscan",
    r"(?i)zmap",
    r"(?i)zgrab",
    r"(?i)censys",

    # Directory brute-forcers
    r"(?i)dirbuster",
    r"(?i)gobuster",
    r"(?i)wfuzz",
    r"(?i)ffuf",
    r"(?i)feroxbuster",
    r"(?i)dirb\b",

    # Exploitation frameworks
    r"(?i)metasploit",
    r"(?i)burpsuite",
    r"(?i)burp\s*suite",

    r"(?i)nuclei",

    # Security testing
    r"(?i)commix",
    r"(?i)hydra",
    r"(?i)medusa",
)

# Claimed crawler -> expected reverse-DNS domain
_FAKE_SEO_BOTS = {
    'Googlebot': 'google.com',
    'Bingbot': 'search.msn.com',
    'Slurp': 'crawl.yahoo.net',
    'DuckDuckBot': 'duckduckgo.com',
    'Baiduspider': 'baidu.com',
    'YandexBot': 'yandex.com',
    'facebookexternalhit': 'facebook.com',
    'Twitterbot': 'twitter.com',
}

_SENSITIVE_FILE_PATHS = (
    # Environment files
    r"(?i)\.env(\.|$)",
    r"(?i)\.env\.local",
    r"(?i)\.env\.production",
    r"(?i)\.env\.staging",
    r"(?i)\.env\.development",
    r"(?i)\.env\.backup",

    # Version control
    r"(?i)/\.git(/|$)",
    r"(?i)/\.svn(/|$)",
    r"(?i)/\.hg(/|$)",
    r"(?i)/\.bzr(/|$)",

    # Server config
    r"(?i)\.htaccess",
    r"(?i)\.htpasswd",

    # Editor files
    r"(?i)/\.idea(/|$)",
    r"(?i)/\.vscode(/|$)",
    r"(?i)/\.project$",
    r"(?i)\.swp$",
    r"(?i)~$",

    # OS files
    r"(?i)\.DS_Store",
    r"(?i)Thumbs\.db",
    r"(?i)desktop\.ini",

    # Package manifests
    r"(?i)composer\.json$",
    r"(?i)composer\.lock$",
    r"(?i)package\.json$",
    r"(?i)package-lock\.json$",
    r"(?i)yarn\.lock$",
    r"(?i)Gemfile(\.lock)?$",
    r"(?i)requirements\.txt$",
    r"(?i)Pipfile(\.lock)?$",

    # Logs
    r"(?i)error[_-]?log",
    r"(?i)access[_-]?log",
    r"(?i)debug[_-]?log",
    r"(?i)\.log$",

    # Database dumps
    r"(?i)\.sql$",
    r"(?i)\.sqlite$",
    r"(?i)\.db$",
    r"(?i)dump\.(sql|gz|zip)",

    # Info / test scripts
    r"(?i)phpinfo\.php",
    r"(?i)info\.php$",
    r"(?i)test\.php$",
    r"(?i)i\.php$",

    # Admin panels
    r"(?i)phpmyadmin",
    r"(?i)adminer\.php",
    r"(?i)adminer",

    r"(?i)web\.config",
)

CONFIG_FILE_PATHS = (
    # WordPress
    'wp-config.php',
    'wp-config.bak',
    'wp-config.old',
    'wp-config.save',
    'wp-config.orig',
    'wp-config.txt',
    'wp-config.tmp',
    'wp-config.php~',
    'wp-config.php.bak',
    'wp-config.php.old',
    'wp-config.php.save',
    'wp-config.php.orig',
    'wp-config.php.swp',
    'wp-config.php.txt',

    # Drupal
    'sites/default/settings.php',
    'sites/default/settings.local.php',

    # Joomla
    'configuration.php',
    'configuration.php.bak',

    # Laravel / dotenv
    '.env',
    '.env.local',
    '.env.production',
    '.env.staging',
    '.env.development',
    '.env.backup',
    '.env.old',
    '.env.save',

    # Generic
    'config.php',
    'config.inc.php',
    'db.php',
    'database.php',
    'database.yml',
    'settings.php',
    'local.php',

    # Magento
    'local.xml',
    'app/etc/local.xml',
    'app/etc/env.php',

    # Symfony
    'parameters.yml',
    'parameters.yaml',
    'app/config/parameters.yml',

    'config.yml',
    'config.yaml',
    'config.json',
    'secrets.json',
    'credentials.json',
)

_PLUGIN_EXPLOIT_PATHS = (
    # WordPress - Revolution Slider (CVE-2014-9734)
    r"(?i)/wp-content/plugins/revslider",

    # WordPress - WP File Manager (CVE-2020-25213)
    r"(?i)/wp-content/plugins/wp-file-manager",

    # WordPress - Duplicator (CVE-2020-11738)
    r"(?i)/wp-content/plugins/duplicator",
    r"(?i)/dup-installer",

    r"(?i)/wp-content/plugins/easy-wp-smtp",
    r"(?i)/wp-content/plugins/contact-form-7/readme\.txt",

    # Direct PHP execution in uploads
    r"(?i)/wp-content/uploads/.{0,256}?\.php",

    # Theme shell upload targets
    r"(?i)/wp-content/themes/[^/]+/404\.php",

    # TimThumb
    r"(?i)/wp-content/themes/.{0,256}?timthumb",
    r"(?i)/wp-content/plugins/.{0,256}?timthumb",

    r"(?i)/wp-content/plugins/gravityforms",
    r"(?i)/wp-content/debug\.log",

    # Drupal - Drupalgeddon (CVE-2018-7600)
    r"(?i)/user/register\?[^#]{0,256}?element_parents[^#]{0,256}?ajax_form",
    r"(?i)/user/password\?[^\[\]]{0,256}[\[\]]",

    # Drupal - REST RCE (CVE-2019-6340)
    r"(?i)/node/\d{1,10}\?.{0,256}?_format=hal_json",
    r"(?i)/_format=hal_json",

    # Drupal - module scanning
    r"(?i)/sites/all/modules/",
    r"(?i)/sites/default/files/",

    # Joomla
    r"(?i)/components/com_fabrik",
    r"(?i)/components/com_fields",
    r"(?i)/libraries/joomla/.{0,256}?\.php",
    r"(?i)/components/com_media/helpers",

    # Plugin readme / changelog probing
    r"(?i)/wp-content/plugins/[^/]+/readme\.txt",
    r"(?i)/wp-content/plugins/[^/]+/changelog\.txt",
)

XMLRPC_METHODS = (
    'system.multicall',
    'system.listMethods',
    'system.getCapabilities',
    'pingback.ping',
    'pingback.extensions.getPingbacks',
    'wp.getUsersBlogs',
    'wp.getAuthors',
    'wp.getUsers',
    'wp.getOptions',
    'wp.setOptions',
    'wp.getPageList',
    'wp.editPage',
    'wp.deletePage',
    'wp.newPost',
    'wp.editPost',
    'wp.deletePost',
    'wp.uploadFile',
    'wp.getProfile',
    'metaWeblog.getUsersBlogs',
    'metaWeblog.newPost',
    'metaWeblog.editPost',
    'metaWeblog.getPost',
)

COMMON_USERNAMES = (
    'admin',
    'administrator',
    'root',
    'test',
    'user',
    'guest',
    'info',
    'support',
    'webmaster',
    'postmaster',
    'hostmaster',
    'manager',
    'sales',
    'contact',
    'office',
    'demo',
    'master',
    'backup',
    'operator',
    'superadmin',
    'sysadmin',
    'www',
    'web',
    'ftp',
    'mysql',
    'postgres',
    'oracle',
    'nagios',
    'staff',
    'service',
)

_SPAM_KEYWORDS = (
    r"(?i)\bviagra\b",
    r"(?i)\bcialis\b",
    r"(?i)\bcasino\b",
    r"(?i)\bpoker\b",
    r"(?i)\blottery\b",
    r"(?i)\bjackpot\b",
    r"(?i)\bcrypto\s*(currency|trading|invest)",
    r"(?i)\bbitcoin\s*(trading|invest|profit)",
    r"(?i)\bforex\s*(trading|signal|profit)",
    r"(?i)\bbinary\s*option",
    r"(?i)\bpayday\s*loan",
    r"(?i)\bcheap\s*(meds|medication|pills|drugs)",
    r"(?i)\bbuy\s*(followers|likes|views)",
    r"(?i)\bfree\s*(iphone|ipad|gift\s*card|money)",
    r"(?i)\b(make|earn)\s*\$?\d{1,12}.{0,64}?(day|hour|week|month)",
    r"(?i)\bwork\s*from\s*home.{0,128}?\$\d",
    r"(?i)\bweight\s*loss\s*(pill|supplement|miracle)",
    r"(?i)\bsex(ual)?\s*(enhancement|pill|supplement)",
    r"(?i)\benlarge(ment)?\s*(pill|supplement)",
    r"(?i)\bpharmacy\s*online",
    r"(?i)\bdiet\s*(pill|supplement|miracle)",
    r"(?i)\bMLM\b",
    r"(?i)\bpyramid\s*scheme",
    r"(?i)\bnigerian?\s*prince",
    r"(?i)\binheritance\s*(fund|claim|million)",
    r"(?i)\b(click|visit)\s*(here|now|this\s*link)\b",
)

_CVE = (
    # Log4Shell (CVE-2021-44228)
    r"(?i)\$\{jndi:(ldap|rmi|dns|iiop|corba|nds|http|https)://",
    r"(?i)\$\{jndi:",
    r"(?i)\$\{\$\{(lower|upper):[jJ]",
    r"(?i)\$\{(env|sys|java|main):",

    # Spring4Shell (CVE-2022-22965)
    r"(?i)class\.module\.classLoader",
    r"(?i)class%2emodule%2eclassLoader",

    # ThinkPHP RCE
    r"(?i)index\.php\?s=/Index/.{0,256}?\\think",
    r"(?i)invokefunction",

    # PHPUnit RCE (CVE-2017-9841)
    r"(?i)vendor/phpunit/phpunit/src/Util/PHP/eval-stdin\.php",

    # Apache Struts OGNL (CVE-2017-5638)
    r"(?i)%\{(?!%\{)[^}]{0,256}\}",

    # Shellshock (CVE-2014-6271)
    r"(?i)\(\)\s*\{\s*:;\s*\}\s*;",

    # WordPress REST user listing
    r"(?i)/wp-json/wp/v2/users",

    # vBulletin (CVE-2019-16759)
    r"(?i)routestring=ajax",

    # Confluence (CVE-2021-26084)
    r"(?i)/pages/createpage-entervariables\.action",

    # Tomcat Ghostcat (CVE-2020-1938)
    r"(?i)/WEB-INF/",
    r"(?i)/META-INF/",

    # F5 BIG-IP (CVE-2020-5902)
    r"(?i)/tmui/login\.jsp",
    r"(?i)/hsqldb",

    # Exchange ProxyShell / ProxyLogon
    r"(?i)/autodiscover/autodiscover\.json",
    r"(?i)/mapi/nspi",
    r"(?i)/ecp/.{0,256}?\.js",

    # Confluence OGNL (CVE-2022-26134)
    r"(?i)\$\{(?!\$\{)[^}]{0,256}?Runtime[^}]{0,256}?exec",
)

_SHELL = (
    # Command parameters
    r"(?i)[?&](cmd|exec|command|execute|run|shell|system|passthru)\s*=",

    # PHP execution functions
    r"(?i)\b(eval|assert|system|exec|shell_exec|passthru|popen|proc_open)\s*\(",

    # Backtick execution
    r"`[^`]*`",

    # Webshell signatures
    r"(?i)c99shell",
    r"(?i)r57shell",
    r"(?i)b374k",
    r"(?i)wso\s*shell",
    r"(?i)alfa\s*shell",
    r"(?i)weevely",
    r"(?i)phpspy",
    r"(?i)ani-?shell",

    # Base64-encoded code
    r"""(?i)base64_decode\s*\(\s*["'][A-Za-z0-9+/=]{20,}""",

    r"(?i)\bphp\s*//.{0,256}?(eval|exec|system|passthru)",

    # File write indicators
    r"(?i)file_put_contents\s*\(",
    r"(?i)fwrite\s*\(",
    r"(?i)move_uploaded_file\s*\(",

    # Process execution
    r"(?i)proc_open\s*\(",
    r"(?i)pcntl_exec\s*\(",

    # Reverse shells
    r"(?i)/bin/(bash|sh|zsh|csh|ksh)",
    r"(?i)nc\s+-[elp]",
    r"(?i)ncat\s",
    r"(?i)python[^\n;|&]{0,64}?-c[^\n]{0,256}?(import|socket|subprocess)",
    r"(?i)perl[^\n;|&]{0,64}?-e[^\n]{0,256}?(socket|exec)",
    r"(?i)ruby[^\n;|&]{0,64}?-e[^\n]{0,256}?(socket|exec)",
)

COMMON_PASSWORDS = (
    'admin',
    'password',
    '123456',
    '12345678',
    '123456789',
    '1234567890',
    'password1',
    'qwerty',
    'abc123',
    'letmein',
    'welcome',
    'monkey',
    'dragon',
    'master',
    'login',
    'princess',
    'football',
    'shadow',
    'sunshine',
    'trustno1',
    'iloveyou',
    'batman',
    'access',
    'hello',
    'charlie',
    'donald',
    '!@#$%^&*',
    'passw0rd',
    'P@ssw0rd',
    'P@ssword1',
    'admin123',
    'root',
    'toor',
    'pass',
    'test',
    'guest',
    'changeme',
    'default',
)

# Every regex table, by accessor name
REGEX_TABLES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'sql_injection_patterns': _SQL_INJECTION,
    'xss_patterns': _XSS,
    'path_traversal_patterns': _PATH_TRAVERSAL,
    'ssrf_patterns': _SSRF,
    'suspicious_user_agents': _SUSPICIOUS_USER_AGENTS,
    'sensitive_file_paths': _SENSITIVE_FILE_PATHS,
    'plugin_exploit_paths': _PLUGIN_EXPLOIT_PATHS,
    'spam_keywords': _SPAM_KEYWORDS,
    'cve_patterns': _CVE,
    'shell_patterns': _SHELL,
})

LEXICON_TABLES: Mapping[str, Tuple[str, ...]] = MappingProxyType({
    'config_file_paths': CONFIG_FILE_PATHS,
    'xmlrpc_methods': XMLRPC_METHODS,
    'common_usernames': COMMON_USERNAMES,
    'common_passwords': COMMON_PASSWORDS,
})


def validate_library() -> int:
    """
    Compile and complexity-check every regex rule in the library.

    Returns:
        Number of rules validated

    Raises:
        PatternCompilationError: If any rule fails to compile
        RegexComplexityError: If any rule is too complex
    """
    total = 0
    for name, table in REGEX_TABLES.items():
        compiled = compile_rules(table)
        total += len(compiled)
        logger.debug(f"Validated {len(compiled)} rules in {name}")
    return total


# Compiled once at import; a failing rule aborts startup
_COMPILED = {name: compile_rules(table) for name, table in REGEX_TABLES.items()}


def sql_injection_patterns() -> Tuple[re.Pattern, ...]:
    return _COMPILED['sql_injection_patterns']


def xss_patterns() -> Tuple[re.Pattern, ...]:
    return _COMPILED['xss_patterns']


def path_traversal_patterns() -> Tuple[re.Pattern, ...]:
    return _COMPILED['path_traversal_patterns']


def ssrf_patterns() -> Tuple[re.Pattern, ...]:
    return _COMPILED['ssrf_patterns']


def suspicious_user_agents() -> Tuple[re.Pattern, ...]:
    """Scanner, exploit framework and brute-forcer user-agent signatures."""
    return _COMPILED['suspicious_user_agents']


def fake_seo_bots() -> Mapping[str, str]:
    """Claimed crawler names mapped to the domain their reverse DNS must end in."""
    return MappingProxyType(_FAKE_SEO_BOTS)


def sensitive_file_paths() -> Tuple[re.Pattern, ...]:
    return _COMPILED['sensitive_file_paths']


def config_file_paths() -> Tuple[str, ...]:
    """Configuration file path substrings."""
    return CONFIG_FILE_PATHS


def plugin_exploit_paths() -> Tuple[re.Pattern, ...]:
    """Known vulnerable plugin, theme and CMS component paths."""
    return _COMPILED['plugin_exploit_paths']


def xmlrpc_methods() -> Tuple[str, ...]:
    """XML-RPC method names commonly abused for amplification and enumeration."""
    return XMLRPC_METHODS


def common_usernames() -> Tuple[str, ...]:
    return COMMON_USERNAMES


def common_passwords() -> Tuple[str, ...]:
    return COMMON_PASSWORDS


def spam_keywords() -> Tuple[re.Pattern, ...]:
    return _COMPILED['spam_keywords']


def cve_patterns() -> Tuple[re.Pattern, ...]:
    """Exploit paths and payload markers for well-known CVEs."""
    return _COMPILED['cve_patterns']


def shell_patterns() -> Tuple[re.Pattern, ...]:
    """Webshell and remote code execution indicators."""
    return _COMPILED['shell_patterns']


def is_common_username(value: str) -> bool:
    return bool(value) and value.lower() in _COMMON_USERNAMES_LOWER


def is_common_password(value: str) -> bool:
    return bool(value) and value in _COMMON_PASSWORDS_SET


_COMMON_USERNAMES_LOWER = frozenset(name.lower() for name in COMMON_USERNAMES)
_COMMON_PASSWORDS_SET = frozenset(COMMON_PASSWORDS)
