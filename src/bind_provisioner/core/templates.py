"""
Configuration templates for BIND
"""

NAMED_CONF_TEMPLATE = """//
// named.conf
//
// Generated by bind-provisioner for {domain} ({role} name server).
// The previous file is kept as {backup_conf}.
//

options {{
    listen-on port 53 {{ any; }};
    listen-on-v6 port 53 {{ any; }};
    directory       "{zone_dir}";
    dump-file       "{zone_dir}/data/cache_dump.db";
    statistics-file "{zone_dir}/data/named_stats.txt";
    memstatistics-file "{zone_dir}/data/named_mem_stats.txt";
    recursing-file  "{zone_dir}/data/named.recursing";
    secroots-file   "{zone_dir}/data/named.secroots";
    allow-query     {{ any; }};

    recursion yes;

    dnssec-validation yes;

    /* Zone transfers are limited to the secondary name server */
    allow-transfer {{ {secondary_ip}; }};

    managed-keys-directory "{zone_dir}/dynamic";

    pid-file "/run/named/named.pid";
    session-keyfile "/run/named/session.key";
}};

logging {{
        channel default_debug {{
                file "data/named.run";
                severity dynamic;
        }};
}};

zone "." IN {{
    type hint;
    file "named.ca";
}};

include "/etc/named.rfc1912.zones";
include "/etc/named.root.key";
"""

PRIMARY_ZONES_TEMPLATE = """
// Primary zone configuration
zone "{domain}" IN {{
    type master;
    file "{forward_file}";
    allow-transfer {{ {secondary_ip}; }};
    notify yes;
}};

// Reverse zone for {network}
zone "{reverse_zone}" IN {{
    type master;
    file "{reverse_file}";
    allow-transfer {{ {secondary_ip}; }};
    notify yes;
}};
"""

SECONDARY_ZONES_TEMPLATE = """
// Secondary zone configuration
zone "{domain}" IN {{
    type slave;
    masters {{ {primary_ip}; }};
    file "{slaves_subdir}/{forward_file}";
}};

// Reverse zone for {network}
zone "{reverse_zone}" IN {{
    type slave;
    masters {{ {primary_ip}; }};
    file "{slaves_subdir}/{reverse_file}";
}};
"""

SOA_TEMPLATE = """$TTL {ttl}
@       IN SOA  {primary_ns}. {mailbox}. (
                                {serial}  ; Serial
                                {refresh:<11} ; Refresh
                                {retry:<11} ; Retry
                                {expire:<11} ; Expire
                                {minimum} )        ; Minimum TTL
        IN NS   {primary_ns}.
        IN NS   {secondary_ns}.
"""
