"""HBase scan filters and comparators that serialize to the protobuf wire form."""