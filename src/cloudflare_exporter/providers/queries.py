# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""GraphQL documents for the Cloudflare analytics API, one per telemetry category."""

_WINDOW = "filter: { datetime_geq: $mintime, datetime_lt: $maxtime }"

ZONE_VARIABLES = "$zoneIDs: [String!], $mintime: Time!, $maxtime: Time!, $limit: Int!"
ACCOUNT_VARIABLES = "$accountID: String!, $mintime: Time!, $maxtime: Time!, $limit: Int!"

HTTP_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequests1mGroups(limit: $limit, {_WINDOW}) {{
        uniq {{ uniques }}
        sum {{
          browserMap {{ pageViews uaBrowserFamily }}
          bytes cachedBytes cachedRequests
          contentTypeMap {{ bytes requests edgeResponseContentTypeName }}
          countryMap {{ bytes clientCountryName requests threats }}
          encryptedBytes encryptedRequests pageViews requests
          responseStatusMap {{ edgeResponseStatus requests }}
          threatPathingMap {{ requests threatPathingName }}
          threats
        }}
        dimensions {{ datetime }}
      }}
    }}
  }}
}}
"""

FIREWALL_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      firewallEventsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{ action source ruleId clientRequestHTTPHost clientCountryName }}
      }}
    }}
  }}
}}
"""

HEALTH_CHECK_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      healthCheckEventsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{ healthStatus originIP region fqdn }}
      }}
    }}
  }}
}}
"""

ADAPTIVE_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequestsAdaptiveGroups(
        limit: $limit,
        filter: {{
          datetime_geq: $mintime,
          datetime_lt: $maxtime,
          cacheStatus_notin: ["hit"],
          originResponseStatus_in: [400, 404, 500, 502, 503, 504, 522, 523, 524]
        }}
      ) {{
        count
        dimensions {{ originResponseStatus clientCountryName clientRequestHTTPHost }}
        avg {{ originResponseDurationMs }}
      }}
    }}
  }}
}}
"""

EDGE_COUNTRY_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequestsEdgeCountryHost: httpRequestsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{ edgeResponseStatus clientCountryName clientRequestHTTPHost }}
      }}
    }}
  }}
}}
"""

REQUEST_METHOD_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequestsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{ clientRequestHTTPMethodName }}
      }}
    }}
  }}
}}
"""

COLO_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequestsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        avg {{ sampleInterval }}
        dimensions {{ clientRequestHTTPHost coloCode datetime originResponseStatus }}
        sum {{ edgeResponseBytes visits }}
      }}
    }}
  }}
}}
"""

COLO_ERROR_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      httpRequestsAdaptiveGroups(
        limit: $limit,
        filter: {{ datetime_geq: $mintime, datetime_lt: $maxtime, edgeResponseStatus_geq: 400 }}
      ) {{
        count
        dimensions {{ clientRequestHTTPHost coloCode edgeResponseStatus }}
        sum {{ edgeResponseBytes visits }}
      }}
    }}
  }}
}}
"""

LOAD_BALANCER_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      loadBalancingRequestsAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{
          lbName
          selectedPoolName
          selectedOriginName
          region
          proxied
          selectedPoolAvgRttMs
          selectedPoolHealthy
          steeringPolicy
        }}
      }}
      loadBalancingRequestsAdaptive(limit: $limit, {_WINDOW}) {{
        lbName
        pools {{
          poolName
          healthy
          origins {{ originName healthy originAddress }}
        }}
      }}
    }}
  }}
}}
"""

LOGPUSH_ZONE_QUERY = f"""
query ({ZONE_VARIABLES}) {{
  viewer {{
    zones(filter: {{ zoneTag_in: $zoneIDs }}) {{
      zoneTag
      logpushHealthAdaptiveGroups(
        limit: $limit,
        filter: {{ datetime_geq: $mintime, datetime_lt: $maxtime, status_neq: 200 }}
      ) {{
        count
        dimensions {{ jobId status destinationType datetime final }}
      }}
    }}
  }}
}}
"""

WORKER_TOTALS_QUERY = f"""
query ({ACCOUNT_VARIABLES}) {{
  viewer {{
    accounts(filter: {{ accountTag: $accountID }}) {{
      workersInvocationsAdaptive(limit: $limit, {_WINDOW}) {{
        dimensions {{ scriptName status }}
        sum {{ requests errors duration }}
        quantiles {{
          cpuTimeP50 cpuTimeP75 cpuTimeP99 cpuTimeP999
          durationP50 durationP75 durationP99 durationP999
        }}
      }}
    }}
  }}
}}
"""

LOGPUSH_ACCOUNT_QUERY = f"""
query ({ACCOUNT_VARIABLES}) {{
  viewer {{
    accounts(filter: {{ accountTag: $accountID }}) {{
      logpushHealthAdaptiveGroups(
        limit: $limit,
        filter: {{ datetime_geq: $mintime, datetime_lt: $maxtime, status_neq: 200 }}
      ) {{
        count
        dimensions {{ jobId status destinationType datetime final }}
      }}
    }}
  }}
}}
"""

MAGIC_TRANSIT_QUERY = f"""
query ({ACCOUNT_VARIABLES}) {{
  viewer {{
    accounts(filter: {{ accountTag: $accountID }}) {{
      magicTransitTunnelHealthChecksAdaptiveGroups(limit: $limit, {_WINDOW}) {{
        count
        dimensions {{
          active datetime edgeColoCity edgeColoCountry edgePopName
          remoteTunnelIPv4 resultStatus siteName tunnelName
        }}
      }}
    }}
  }}
}}
"""
