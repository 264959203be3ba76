"""Cell-block compression: the Codec interface and a snappy codec."""